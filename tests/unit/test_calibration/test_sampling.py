import warnings
import pytest
import numpy as np
import arviz as az
import pymc as pm
from unittest.mock import MagicMock, patch
from pmodel_calibration.calibration.parameter_bounds import ParameterBounds
from pmodel_calibration.calibration.prior import UniformPrior
from pmodel_calibration.calibration.sampling import (
    BlackBoxLikelihood,
    create_sampler,
    DEzsSampler,
    DESampler,
    MetropolisSampler,
)
from pmodel_calibration.calibration.settings import SamplerSettings
from pmodel_calibration.exceptions import SettingsError


@pytest.fixture
def prior():
    bounds = ParameterBounds.from_dict(
        {
            "kphio": {"lower": 0.02, "upper": 0.15, "init": 0.05},
            "err_gpp": {"lower": 0.1, "upper": 3, "init": 0.8},
        }
    )
    return UniformPrior.from_bounds(bounds, seed=1)


class TestSamplerFactory:
    @pytest.mark.parametrize(
        "name, cls",
        [("DEzs", DEzsSampler), ("dezs", DEzsSampler), ("DE", DESampler), ("Metropolis", MetropolisSampler)],
    )
    def test_create(self, name, cls):
        assert isinstance(create_sampler(name, SamplerSettings()), cls)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown sampler"):
            create_sampler("SMC", SamplerSettings())

    def test_kwargs_forwarded(self):
        sampler = create_sampler("DEzs", SamplerSettings(), cores=2, verbose=False, scaling=1e-2)
        assert sampler.cores == 2
        assert sampler.scaling == 1e-2
        assert sampler.verbose is False

    def test_de_needs_three_internal_chains(self):
        with pytest.raises(SettingsError, match="start_value"):
            DESampler(SamplerSettings(start_value=2))

    def test_dezs_tune_target(self):
        with pytest.raises(SettingsError, match="tuning"):
            DEzsSampler(SamplerSettings(), tune="epsilon")


class TestModelConstruction:
    def test_black_box_op(self):
        loglik = MagicMock(return_value=-3.0)
        op = BlackBoxLikelihood(loglik)
        outputs = [[None]]
        op.perform(None, [np.array([0.1, 0.5])], outputs)
        assert float(outputs[0][0]) == -3.0
        np.testing.assert_array_equal(loglik.call_args[0][0], [0.1, 0.5])

    def test_build_model(self, prior):
        sampler = DEzsSampler(SamplerSettings(), verbose=False)
        model = sampler.build_model(lambda x: -float(np.sum(x**2)), prior)
        assert [rv.name for rv in model.free_RVs] == ["kphio", "err_gpp"]
        assert "loglik" in [d.name for d in model.deterministics]
        assert "likelihood" in [p.name for p in model.potentials]

    def test_step_method(self, prior):
        sampler = DEzsSampler(SamplerSettings(), verbose=False)
        with sampler.build_model(lambda x: 0.0, prior):
            step = sampler._create_step()
        assert isinstance(step, pm.DEMetropolisZ)


class TestSampling:
    @pytest.fixture
    def kphio_prior(self):
        bounds = ParameterBounds.from_dict({"kphio": {"lower": 0.02, "upper": 0.15, "init": 0.05}})
        return UniformPrior.from_bounds(bounds, seed=1)

    def test_trace_records_loglik(self, kphio_prior):
        sampler = DEzsSampler(SamplerSettings(burnin=30, iterations=90, n_chains=1, start_value=3), verbose=False)
        trace, runtime = sampler.sample(lambda x: -1e3 * float(np.sum((x - 0.08) ** 2)), kphio_prior, seed=1)

        assert "loglik" in trace.posterior
        assert "kphio" in trace.posterior
        assert trace.posterior["loglik"].shape == (3, 20)
        assert np.all(np.isfinite(trace.posterior["loglik"].values))
        assert set(runtime) == {"user", "system", "elapsed"}

    def test_sampler_warnings_propagate(self, kphio_prior):
        def warn_and_sample(**kwargs):
            warnings.warn("Initial point has a non-finite log-probability", UserWarning)
            return az.from_dict(posterior={"kphio": np.full((3, 2), 0.08), "loglik": np.zeros((3, 2))})

        sampler = DEzsSampler(SamplerSettings(burnin=3, iterations=9, n_chains=1, start_value=3), verbose=False)
        with patch.object(pm, "sample", side_effect=warn_and_sample) as sample:
            with pytest.warns(UserWarning, match="non-finite"):
                sampler.sample(lambda x: 0.0, kphio_prior, seed=1)
        assert sample.call_args.kwargs["chains"] == 3
