"""
Calibration result files.

Results are pickled to `<output_dir>/out_calib_<settings string>.pkl`, where
the settings string is derived from the experiment name and the sampler
configuration, so that runs with different settings never overwrite each
other.
"""

from pathlib import Path
from typing import Union
import pickle

from pmodel_calibration.calibration.analysis.diagnostics import get_settings_str
from pmodel_calibration.calibration.core.result import CalibrationOutput
from ...exceptions import DataValidationError

FILE_PREFIX = "out_calib_"


def result_path(out: CalibrationOutput, output_dir: Union[str, Path] = "data") -> Path:
    """File path of a calibration result, e.g. 'data/out_calib_Setup-s1-...x3_.pkl'."""
    return Path(output_dir) / f"{FILE_PREFIX}{get_settings_str(out)}.pkl"


def save_calibration_output(out: CalibrationOutput, output_dir: Union[str, Path] = "data") -> Path:
    """
    Pickle a calibration result.

    Args:
        out (CalibrationOutput): The named result.
        output_dir (Union[str, Path]): Target directory; created if missing.

    Returns:
        Path: The written file.
    """
    path = result_path(out, output_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        pickle.dump(out, f, protocol=pickle.HIGHEST_PROTOCOL)
    return path


def load_calibration_output(filepath: Union[str, Path]) -> CalibrationOutput:
    """
    Load a pickled calibration result.

    Only load files from trusted sources; unpickling runs arbitrary code.

    Raises:
        DataValidationError: If the file does not hold a CalibrationOutput.
    """
    with open(filepath, "rb") as f:
        out = pickle.load(f)
    if not isinstance(out, CalibrationOutput):
        raise DataValidationError(f"{filepath} holds {type(out).__name__}, not a CalibrationOutput")
    return out
