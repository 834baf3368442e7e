"""Simulator module."""

from typing import Callable, Dict, List, Optional, TYPE_CHECKING
import importlib
import pandas as pd

from ...exceptions import SimulationError

if TYPE_CHECKING:
    from pmodel_calibration.io.loaders.forcing_data import ForcingData


class PModelSimulator:
    """
    Runs the P-model with a given parameter set.

    The P-model itself is not part of this package; it is injected as a
    callable ``model(drivers, params)`` that takes the driver table and a
    complete parameter mapping and returns a long table with the columns
    'sitename', 'date' and one column per simulated target.

    Args:
        model (Callable): The P-model runner.
        par_fixed (Optional[Dict[str, float]]): Parameters held fixed during
            calibration; merged under every calibrated parameter set.
        verbose (bool): Whether to enable progress output. Defaults to False.
    """

    def __init__(
        self,
        model: Callable[[pd.DataFrame, Dict[str, float]], pd.DataFrame],
        par_fixed: Optional[Dict[str, float]] = None,
        verbose: bool = False,
    ):
        self.model = model
        self.par_fixed = dict(par_fixed or {})
        self.verbose = verbose
        self.n_runs = 0

    def simulate_with_parameters(
        self, parameters: Dict[str, float], drivers: "ForcingData", targets: List[str]
    ) -> pd.DataFrame:
        """
        Run the P-model using a specific set of parameters.

        Args:
            parameters (Dict[str, float]): Calibrated parameter values {name: value}.
                Likelihood error terms ('err_*') must already be removed.
            drivers (ForcingData): Driver data for all sites.
            targets (List[str]): Output columns required from the model.

        Returns:
            pd.DataFrame: Columns 'sitename', 'date' and the targets.

        Raises:
            SimulationError: If the model fails or misses required outputs.
        """
        params = {**self.par_fixed, **parameters}
        try:
            output = self.model(drivers.data, params)
        except Exception as e:
            raise SimulationError(f"P-model run failed: {e}") from e
        self.n_runs += 1
        return self._extract_outputs(output, targets)

    def _extract_outputs(self, output: pd.DataFrame, targets: List[str]) -> pd.DataFrame:
        """
        Check and trim the raw model output.

        Args:
            output (pd.DataFrame): Raw output of the model callable.
            targets (List[str]): Required target columns.

        Returns:
            pd.DataFrame: Output restricted to 'sitename', 'date' and targets.
        """
        if not isinstance(output, pd.DataFrame):
            raise SimulationError(f"P-model returned {type(output).__name__}, expected a DataFrame")
        required = ["sitename", "date"] + list(targets)
        missing = [col for col in required if col not in output.columns]
        if missing:
            raise SimulationError(f"P-model output is missing columns {missing}")
        output = output[required].copy()
        output["date"] = pd.to_datetime(output["date"])
        return output


def load_model(reference: str) -> Callable[[pd.DataFrame, Dict[str, float]], pd.DataFrame]:
    """
    Resolve a P-model runner from a 'package.module:function' reference.

    Args:
        reference (str): Import path and attribute, separated by a colon.

    Returns:
        Callable: The model runner.

    Raises:
        ValueError: If the reference is malformed or does not name a callable.
    """
    module_name, sep, attr = reference.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Model reference must look like 'module:function', got '{reference}'")
    model = getattr(importlib.import_module(module_name), attr)
    if not callable(model):
        raise ValueError(f"'{reference}' is not callable")
    return model
