"""Base calibrator module."""

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, TYPE_CHECKING
import pandas as pd

from .simulator import PModelSimulator

if TYPE_CHECKING:
    from pmodel_calibration.io.loaders.forcing_data import ForcingData
    from ..settings import CalibrationSettings
    from .result import CalibrationOutput


class BaseCalibrator(ABC):
    """
    Base class for all calibrators.

    Holds the P-model runner and builds a simulator per calibration, so that
    each run can hold its own fixed parameters.

    Args:
        model (Callable): The P-model runner, ``model(drivers, params) -> DataFrame``.
        verbose (bool): Whether to enable progress output. Defaults to True.
    """

    def __init__(self, model: Callable[[pd.DataFrame, Dict[str, float]], pd.DataFrame], verbose: bool = True):
        self.model = model
        self.verbose = verbose

    @abstractmethod
    def calibrate(
        self,
        drivers: "ForcingData",
        obs: pd.DataFrame,
        settings: "CalibrationSettings",
        par_fixed: Optional[Dict[str, float]] = None,
        targets: Optional[List[str]] = None,
    ) -> "CalibrationOutput":
        """
        Run the calibration workflow.

        Args:
            drivers (ForcingData): Driver data of all sites.
            obs (pd.DataFrame): Observations per site ('sitename', 'data').
            settings (CalibrationSettings): Method, metric, sampler and bounds.
            par_fixed (Optional[Dict[str, float]]): Parameters held fixed.
            targets (Optional[List[str]]): Target variables; defaults to ['gpp'].

        Returns:
            CalibrationOutput: The results of the calibration process.
        """
        pass

    def _create_simulator(self, par_fixed: Optional[Dict[str, float]] = None) -> PModelSimulator:
        return PModelSimulator(self.model, par_fixed=par_fixed, verbose=self.verbose)
