import math
import pytest
import pandas as pd
from unittest.mock import MagicMock
from pmodel_calibration.calibration.core.simulator import PModelSimulator, load_model
from pmodel_calibration.io.loaders.forcing_data import ForcingData
from pmodel_calibration.exceptions import SimulationError


@pytest.fixture
def drivers():
    forcing = pd.DataFrame({"date": pd.date_range("2010-01-01", periods=3, freq="D"), "ppfd": [1.0, 2.0, 3.0]})
    return ForcingData(pd.DataFrame([{"sitename": "CH-Dav", "forcing": forcing}]))


@pytest.fixture
def mock_model():
    model = MagicMock()
    model.return_value = pd.DataFrame(
        {
            "sitename": ["CH-Dav"] * 3,
            "date": ["2010-01-01", "2010-01-02", "2010-01-03"],
            "gpp": [1.0, 2.0, 3.0],
            "transp": [0.1, 0.2, 0.3],
        }
    )
    return model


class TestPModelSimulator:
    def test_simulate_with_parameters(self, mock_model, drivers):
        sim = PModelSimulator(mock_model, par_fixed={"rd_to_vcmax": 0.014})
        out = sim.simulate_with_parameters({"kphio": 0.05}, drivers, ["gpp"])

        assert list(out.columns) == ["sitename", "date", "gpp"]
        assert pd.api.types.is_datetime64_any_dtype(out["date"])
        mock_model.assert_called_once()
        assert mock_model.call_args[0][1] == {"rd_to_vcmax": 0.014, "kphio": 0.05}
        assert sim.n_runs == 1

    def test_calibrated_overrides_fixed(self, mock_model, drivers):
        sim = PModelSimulator(mock_model, par_fixed={"kphio": 0.09})
        sim.simulate_with_parameters({"kphio": 0.05}, drivers, ["gpp"])
        assert mock_model.call_args[0][1]["kphio"] == 0.05

    def test_missing_output_column(self, mock_model, drivers):
        sim = PModelSimulator(mock_model)
        with pytest.raises(SimulationError, match="vcmax25"):
            sim.simulate_with_parameters({}, drivers, ["gpp", "vcmax25"])

    def test_non_dataframe_output(self, drivers):
        sim = PModelSimulator(MagicMock(return_value=[1, 2, 3]))
        with pytest.raises(SimulationError, match="expected a DataFrame"):
            sim.simulate_with_parameters({}, drivers, ["gpp"])

    def test_model_exception_wrapped(self, drivers):
        sim = PModelSimulator(MagicMock(side_effect=ValueError("bad forcing")))
        with pytest.raises(SimulationError) as excinfo:
            sim.simulate_with_parameters({}, drivers, ["gpp"])
        assert isinstance(excinfo.value.__cause__, ValueError)
        assert sim.n_runs == 0


class TestLoadModel:
    def test_resolves_callable(self):
        assert load_model("math:sqrt") is math.sqrt

    @pytest.mark.parametrize("reference", ["math", "math:", ":sqrt"])
    def test_malformed_reference(self, reference):
        with pytest.raises(ValueError, match="module:function"):
            load_model(reference)

    def test_not_callable(self):
        with pytest.raises(ValueError, match="not callable"):
            load_model("math:pi")
