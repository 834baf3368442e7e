"""
Parameter bounds for P-model calibration.

Each calibrated parameter carries a lower and upper bound for its uniform
prior and an initial ("best guess") value that must lie within them.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Iterator
import numpy as np

from ..exceptions import SettingsError


@dataclass
class ParameterBound:
    """
    Bounds and initial value of a single calibrated parameter.

    Attributes:
        name (str): Parameter name as understood by the P-model.
        lower (float): Lower bound of the prior.
        upper (float): Upper bound of the prior.
        init (float): Initial value, lower <= init <= upper.

    Raises:
        SettingsError: If the bounds are inverted or init lies outside them.
    """

    name: str
    lower: float
    upper: float
    init: float

    def __post_init__(self):
        if self.lower > self.upper:
            raise SettingsError(
                f"Parameter '{self.name}': lower bound {self.lower} is greater than upper bound {self.upper}"
            )
        if not self.lower <= self.init <= self.upper:
            raise SettingsError(
                f"Parameter '{self.name}': init {self.init} outside bounds [{self.lower}, {self.upper}]"
            )

    def is_within_bounds(self, value: float) -> bool:
        """Check feasibility."""
        return self.lower <= value <= self.upper

    def clip(self, value: float) -> float:
        """Project to bounds."""
        return float(np.clip(value, self.lower, self.upper))

    def get_relative_position(self, value: float) -> float:
        """
        Position of a value within the bounds, 0 at lower and 1 at upper.

        Degenerate bounds (lower == upper) return 0.5.
        """
        width = self.upper - self.lower
        if width == 0:
            return 0.5
        return (value - self.lower) / width

    def to_dict(self) -> Dict[str, float]:
        return {"lower": self.lower, "upper": self.upper, "init": self.init}


class ParameterBounds:
    """
    Ordered collection of parameter bounds.

    The insertion order defines the parameter order used by the sampler
    and in every posterior matrix.
    """

    def __init__(self, bounds: Optional[List[ParameterBound]] = None):
        self.bounds: Dict[str, ParameterBound] = {}
        for bound in bounds or []:
            self.bounds[bound.name] = bound

    @classmethod
    def from_dict(cls, par: Dict[str, Dict[str, float]]) -> "ParameterBounds":
        """
        Build bounds from a mapping ``{name: {"lower": .., "upper": .., "init": ..}}``.

        Args:
            par (Dict[str, Dict[str, float]]): Bounds per parameter.

        Returns:
            ParameterBounds: The validated collection.
        """
        instance = cls()
        for name, entry in par.items():
            missing = {"lower", "upper", "init"} - set(entry)
            if missing:
                raise SettingsError(f"Parameter '{name}' is missing {sorted(missing)}")
            instance.add_bound(name, entry["lower"], entry["upper"], entry["init"])
        return instance

    def add_bound(self, name: str, lower: float, upper: float, init: float) -> ParameterBound:
        """Add (or replace) the bound of a parameter."""
        bound = ParameterBound(name, lower, upper, init)
        self.bounds[name] = bound
        return bound

    @property
    def names(self) -> List[str]:
        return list(self.bounds.keys())

    @property
    def lower(self) -> np.ndarray:
        return np.array([b.lower for b in self.bounds.values()], dtype=float)

    @property
    def upper(self) -> np.ndarray:
        return np.array([b.upper for b in self.bounds.values()], dtype=float)

    @property
    def init(self) -> np.ndarray:
        return np.array([b.init for b in self.bounds.values()], dtype=float)

    def get_bounds_tuple(self, name: str) -> Optional[Tuple[float, float]]:
        bound = self.bounds.get(name)
        if bound is None:
            return None
        return (bound.lower, bound.upper)

    def get_default_values(self, names: Optional[List[str]] = None) -> Dict[str, float]:
        """
        Initial values of the requested parameters; unknown names are skipped.
        """
        if names is None:
            names = self.names
        return {name: self.bounds[name].init for name in names if name in self.bounds}

    def is_within_bounds(self, name: str, value: float) -> bool:
        if name not in self.bounds:
            return True
        return self.bounds[name].is_within_bounds(value)

    def clip_to_bounds(self, name: str, value: float) -> float:
        if name not in self.bounds:
            return value
        return self.bounds[name].clip(value)

    def validate_parameters(self, parameters: Dict[str, float], raise_on_invalid: bool = False) -> Dict[str, bool]:
        """
        Check a parameter set against the bounds.

        Args:
            parameters (Dict[str, float]): Values to check.
            raise_on_invalid (bool): Raise instead of reporting.

        Returns:
            Dict[str, bool]: Feasibility per parameter.

        Raises:
            SettingsError: If raise_on_invalid and a value is outside its bounds.
        """
        results = {}
        for name, value in parameters.items():
            valid = self.is_within_bounds(name, value)
            if not valid and raise_on_invalid:
                lower, upper = self.get_bounds_tuple(name)
                raise SettingsError(f"Parameter '{name}' = {value} outside bounds [{lower}, {upper}]")
            results[name] = valid
        return results

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {name: bound.to_dict() for name, bound in self.bounds.items()}

    def __contains__(self, name: str) -> bool:
        return name in self.bounds

    def __iter__(self) -> Iterator[ParameterBound]:
        return iter(self.bounds.values())

    def __len__(self) -> int:
        return len(self.bounds)

    def __repr__(self) -> str:
        return f"ParameterBounds({self.names})"
