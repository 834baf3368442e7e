"""
pmodel_calibration: Bayesian Calibration of the P-model against GPP.

This package calibrates parameters of the P-model (quantum yield and its
temperature dependence, soil moisture stress, and optionally the
photosynthetic cost and acclimation parameters) against observed gross
primary productivity using differential evolution MCMC.

Key modules:
- calibration: Settings, samplers, calibration methods and result analysis.
- io: Driver data loaders, validation and result persistence.
- exceptions: Custom error types.
"""

from .calibration import (
    Calibrator,
    BayesianCalibrator,
    CalibrationOutput,
    ParameterBounds,
    CalibrationSettings,
    ExperimentSetup,
    create_experiment,
    get_settings_str,
    get_runtime,
    plot_prior_posterior_density,
)
from .io import (
    ForcingData,
    DataValidator,
    ValidationResult,
    save_calibration_output,
    load_calibration_output,
)
from .exceptions import (
    PModelCalibrationError,
    DataValidationError,
    CalibrationError,
    SettingsError,
    SimulationError,
)

__version__ = "0.1.0"

__all__ = [
    "Calibrator",
    "BayesianCalibrator",
    "CalibrationOutput",
    "ParameterBounds",
    "CalibrationSettings",
    "ExperimentSetup",
    "create_experiment",
    "get_settings_str",
    "get_runtime",
    "plot_prior_posterior_density",
    "ForcingData",
    "DataValidator",
    "ValidationResult",
    "save_calibration_output",
    "load_calibration_output",
    "PModelCalibrationError",
    "DataValidationError",
    "CalibrationError",
    "SettingsError",
    "SimulationError",
]
