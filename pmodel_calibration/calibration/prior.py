"""Prior module."""

from dataclasses import dataclass, field
from typing import List, Optional, Union
import numpy as np

from .parameter_bounds import ParameterBounds


@dataclass
class UniformPrior:
    """
    Independent uniform prior over all calibrated parameters.

    Attributes:
        names (List[str]): Parameter names, in sampler order.
        lower (np.ndarray): Lower bounds.
        upper (np.ndarray): Upper bounds.
        best (np.ndarray): Initial values, kept as the prior's best guess.
        seed (Optional[int]): Seed of the random generator used by `sample`.
    """

    names: List[str]
    lower: np.ndarray
    upper: np.ndarray
    best: np.ndarray
    seed: Optional[int] = None
    _rng: np.random.Generator = field(init=False, repr=False)

    def __post_init__(self):
        self.lower = np.asarray(self.lower, dtype=float)
        self.upper = np.asarray(self.upper, dtype=float)
        self.best = np.asarray(self.best, dtype=float)
        self._rng = np.random.default_rng(self.seed)

    @classmethod
    def from_bounds(cls, bounds: ParameterBounds, seed: Optional[int] = None) -> "UniformPrior":
        return cls(names=bounds.names, lower=bounds.lower, upper=bounds.upper, best=bounds.init, seed=seed)

    def sample(self, n: int = 1, rng: Optional[Union[int, np.random.Generator]] = None) -> np.ndarray:
        """
        Draw independent samples from the prior.

        Args:
            n (int): Number of draws.
            rng: Optional seed or generator; defaults to the prior's own generator.

        Returns:
            np.ndarray: Array of shape (n, n_parameters).
        """
        generator = self._rng if rng is None else np.random.default_rng(rng)
        return generator.uniform(self.lower, self.upper, size=(n, len(self.names)))

    def log_density(self, x: np.ndarray) -> np.ndarray:
        """Log density of one or more parameter vectors; -inf outside the support."""
        x = np.atleast_2d(x)
        inside = np.all((x >= self.lower) & (x <= self.upper), axis=1)
        log_volume = np.sum(np.log(self.upper - self.lower))
        return np.where(inside, -log_volume, -np.inf)

