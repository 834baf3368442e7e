"""
Custom exceptions for pmodel_calibration.

This module defines the exception hierarchy used throughout the
calibration package to handle various error states.
"""


class PModelCalibrationError(Exception):
    """
    Base exception for the pmodel_calibration package.

    All custom exceptions in this package inherit from this class.
    """

    pass


class DataValidationError(PModelCalibrationError):
    """
    Raised when driver or observation data fails validation.

    This error indicates that the forcing table is missing required
    columns (e.g. 'sitename', 'forcing', 'date') or the requested target
    variables.
    """

    pass


class CalibrationError(PModelCalibrationError):
    """
    Raised when the calibration process fails.

    This includes sampler failures, unexpected sampler output types and
    missing likelihood parameters.
    """

    pass


class SettingsError(CalibrationError):
    """
    Raised for an inconsistent calibration configuration.

    Examples are an initial value outside its prior bounds, or a parameter
    that is both calibrated and held fixed.
    """

    pass


class SimulationError(PModelCalibrationError):
    """
    Raised when a P-model run fails.

    This error is triggered when the injected model callable raises or
    returns output without the requested target columns.
    """

    pass
