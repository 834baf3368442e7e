"""
Input/Output and Data Management for P-model calibration

This subpackage provides tools for loading driver data, checking its
quality and storing calibration results.
"""

from .loaders.forcing_data import ForcingData, flatten_observations
from .persistence.results import save_calibration_output, load_calibration_output, result_path
from .validation.validators import DataValidator, ValidationResult

__all__ = [
    "ForcingData",
    "flatten_observations",
    "save_calibration_output",
    "load_calibration_output",
    "result_path",
    "DataValidator",
    "ValidationResult",
]
