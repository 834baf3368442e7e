import pytest
import numpy as np
from pmodel_calibration.calibration.parameter_bounds import ParameterBounds
from pmodel_calibration.calibration.prior import UniformPrior


def make_prior(seed=1982):
    bounds = ParameterBounds.from_dict(
        {
            "kphio": {"lower": 0.02, "upper": 0.15, "init": 0.05},
            "kphio_par_b": {"lower": 10, "upper": 30, "init": 20},
        }
    )
    return UniformPrior.from_bounds(bounds, seed=seed)


class TestUniformPrior:
    def test_from_bounds(self):
        prior = make_prior()
        assert prior.names == ["kphio", "kphio_par_b"]
        np.testing.assert_allclose(prior.best, [0.05, 20.0])

    def test_sample_shape_and_support(self):
        draws = make_prior().sample(500)
        assert draws.shape == (500, 2)
        assert np.all(draws[:, 0] >= 0.02) and np.all(draws[:, 0] <= 0.15)
        assert np.all(draws[:, 1] >= 10) and np.all(draws[:, 1] <= 30)

    def test_seeded_prior_is_reproducible(self):
        np.testing.assert_array_equal(make_prior(1).sample(5), make_prior(1).sample(5))

    def test_explicit_rng(self):
        prior = make_prior()
        np.testing.assert_array_equal(prior.sample(3, rng=7), prior.sample(3, rng=7))

    def test_log_density(self):
        prior = make_prior()
        inside = prior.log_density(np.array([0.1, 15.0]))
        outside = prior.log_density(np.array([0.2, 15.0]))
        assert inside[0] == pytest.approx(-np.log(0.13 * 20))
        assert outside[0] == -np.inf
