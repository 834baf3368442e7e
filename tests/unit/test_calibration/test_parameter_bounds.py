import pytest
import numpy as np
from pmodel_calibration.calibration.parameter_bounds import ParameterBound, ParameterBounds
from pmodel_calibration.exceptions import SettingsError, CalibrationError


class TestParameterBound:
    def test_init_outside_bounds_rejected(self):
        with pytest.raises(SettingsError, match="outside bounds"):
            ParameterBound("kphio", 0.02, 0.15, 0.2)

    def test_init_on_boundary_accepted(self):
        pb = ParameterBound("soilm_betao", 0.0, 1.0, 0.0)
        assert pb.init == 0.0

    def test_inverted_bounds_rejected(self):
        with pytest.raises(SettingsError, match="greater than upper"):
            ParameterBound("kphio", 0.15, 0.02, 0.05)

    def test_settings_error_is_calibration_error(self):
        with pytest.raises(CalibrationError):
            ParameterBound("kphio", 0.02, 0.15, 1.0)

    def test_clip_and_within(self):
        pb = ParameterBound("kphio_par_b", 10, 30, 20)
        assert pb.is_within_bounds(25)
        assert not pb.is_within_bounds(31)
        assert pb.clip(35) == 30.0
        assert pb.clip(5) == 10.0

    def test_get_relative_position(self):
        pb = ParameterBound("test", 10.0, 20.0, 15.0)
        assert pb.get_relative_position(15.0) == 0.5

        pb_fixed = ParameterBound("test", 10.0, 10.0, 10.0)
        assert pb_fixed.get_relative_position(10.0) == 0.5


class TestParameterBoundsManager:
    def test_from_dict_keeps_order(self):
        bounds = ParameterBounds.from_dict(
            {
                "kphio": {"lower": 0.02, "upper": 0.15, "init": 0.05},
                "err_gpp": {"lower": 0.1, "upper": 3, "init": 0.8},
            }
        )
        assert bounds.names == ["kphio", "err_gpp"]
        np.testing.assert_allclose(bounds.lower, [0.02, 0.1])
        np.testing.assert_allclose(bounds.upper, [0.15, 3.0])
        np.testing.assert_allclose(bounds.init, [0.05, 0.8])

    def test_from_dict_missing_key(self):
        with pytest.raises(SettingsError, match="missing"):
            ParameterBounds.from_dict({"kphio": {"lower": 0.02, "upper": 0.15}})

    def test_from_dict_init_outside(self):
        with pytest.raises(SettingsError, match="kphio"):
            ParameterBounds.from_dict({"kphio": {"lower": 0.02, "upper": 0.15, "init": 0.01}})

    def test_manager_methods_missing_bound(self):
        pm = ParameterBounds()
        assert pm.get_bounds_tuple("missing") is None
        assert pm.is_within_bounds("missing", 100.0) is True
        assert pm.clip_to_bounds("missing", 100.0) == 100.0

    def test_validate_parameters_raise(self):
        pm = ParameterBounds()
        pm.add_bound("p1", 0, 1, 0.5)
        assert pm.validate_parameters({"p1": 1.5}) == {"p1": False}
        with pytest.raises(SettingsError, match="outside bounds"):
            pm.validate_parameters({"p1": 1.5}, raise_on_invalid=True)

    def test_get_default_values(self):
        pm = ParameterBounds()
        pm.add_bound("p1", 0, 1, 0.5)
        defaults = pm.get_default_values(["p1", "p2"])
        assert defaults == {"p1": 0.5}

    def test_container_protocol(self):
        pm = ParameterBounds([ParameterBound("a", 0, 1, 0.5), ParameterBound("b", 1, 2, 1.5)])
        assert len(pm) == 2
        assert "a" in pm
        assert [b.name for b in pm] == ["a", "b"]
        assert pm.to_dict()["b"] == {"lower": 1, "upper": 2, "init": 1.5}
