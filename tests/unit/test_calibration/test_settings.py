import pytest
from pmodel_calibration.calibration.settings import (
    SamplerSettings,
    CalibrationSettings,
    ExperimentSetup,
    create_experiment,
    reduced_setup,
    full_setup,
    site_setup,
    DEFAULT_FIXED_PARAMETERS,
)
from pmodel_calibration.calibration.parameter_bounds import ParameterBounds
from pmodel_calibration.calibration.likelihood import cost_likelihood_pmodel
from pmodel_calibration.exceptions import SettingsError


class TestSamplerSettings:
    def test_defaults(self):
        s = SamplerSettings()
        assert (s.burnin, s.iterations, s.n_chains, s.start_value) == (10000, 50000, 3, 3)

    def test_draws_and_tune_per_internal_chain(self):
        s = SamplerSettings(burnin=10000, iterations=50000, start_value=3)
        assert s.tune_per_chain == 3333
        assert s.draws_per_chain == 13333

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"burnin": 100, "iterations": 100},
            {"burnin": -1},
            {"n_chains": 0},
            {"start_value": 0},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(SettingsError):
            SamplerSettings(**kwargs)


class TestExperiments:
    def test_reduced_setup(self):
        setup = reduced_setup()
        assert setup.name == "s1"
        assert setup.settings.par.names == [
            "kphio",
            "kphio_par_a",
            "kphio_par_b",
            "soilm_thetastar",
            "soilm_betao",
            "err_gpp",
        ]
        assert setup.par_fixed == DEFAULT_FIXED_PARAMETERS
        assert setup.targets == ["gpp"]
        assert setup.settings.control.sampler == "DEzs"
        assert setup.settings.metric is cost_likelihood_pmodel
        assert setup.settings.seed == 1982

    def test_full_setup(self):
        setup = full_setup()
        assert len(setup.settings.par) == 9
        assert setup.par_fixed == {"rd_to_vcmax": 0.014}
        assert setup.settings.par.get_bounds_tuple("beta_unitcostratio") == (50, 250)
        assert setup.settings.par.get_default_values(["tau_acclim"]) == {"tau_acclim": 20.0}

    def test_multi_target_not_available(self):
        with pytest.raises(NotImplementedError, match="s3"):
            create_experiment("s3")

    def test_unknown_experiment(self):
        with pytest.raises(ValueError, match="Unknown experiment"):
            create_experiment("s9")

    def test_create_with_sampler_settings(self):
        setup = create_experiment("s2", SamplerSettings(burnin=10, iterations=100, n_chains=2, start_value=3))
        assert setup.settings.control.settings.iterations == 100

    def test_settings_are_independent(self):
        a = create_experiment("s1")
        b = create_experiment("s1")
        a.settings.par.add_bound("kphio", 0.0, 1.0, 0.5)
        assert b.settings.par.get_bounds_tuple("kphio") == (0.02, 0.15)

    def test_overlap_rejected(self):
        settings = CalibrationSettings(par=ParameterBounds.from_dict({"kc_jmax": {"lower": 0.1, "upper": 0.8, "init": 0.41}}))
        with pytest.raises(SettingsError, match="kc_jmax"):
            ExperimentSetup(name="x", settings=settings, par_fixed={"kc_jmax": 0.41})

    def test_empty_targets_rejected(self):
        settings = CalibrationSettings(par=ParameterBounds.from_dict({"kphio": {"lower": 0.02, "upper": 0.15, "init": 0.05}}))
        with pytest.raises(SettingsError, match="target"):
            ExperimentSetup(name="x", settings=settings, targets=[])

    def test_to_dict(self):
        d = reduced_setup().settings.to_dict()
        assert d["metric"] == "cost_likelihood_pmodel"
        assert d["control"]["settings"]["start_value"] == 3
        assert d["par"]["err_gpp"] == {"lower": 0.1, "upper": 3, "init": 0.8}


class TestSiteSetup:
    def test_thetastar_scaled_by_whc(self):
        setup = site_setup({"whc": 200.0}, name="FR-Pue")
        bound = setup.settings.par.bounds["soilm_thetastar"]
        assert bound.lower == pytest.approx(2.0)
        assert bound.upper == pytest.approx(200.0)
        assert bound.init == pytest.approx(120.0)
        assert setup.name == "FR-Pue"

    def test_global_bounds_untouched(self):
        site_setup({"whc": 500.0})
        assert reduced_setup().settings.par.get_bounds_tuple("soilm_thetastar") == (1, 250)

    def test_missing_whc(self):
        with pytest.raises(SettingsError, match="whc"):
            site_setup({"lon": 3.6})
