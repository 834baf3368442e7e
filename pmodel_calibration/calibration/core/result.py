"""Result module."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from datetime import datetime
import numpy as np
import arviz as az

from ..prior import UniformPrior


@dataclass
class ChainSettings:
    """
    Settings and runtime of one independent chain.

    Attributes:
        iterations (int): Total iterations, burn-in included.
        burnin (int): Burn-in iterations.
        n_chains (int): Number of internal chains.
        sampler (str): Sampler name (e.g. 'DEzs').
        runtime (Dict[str, float]): CPU ('user', 'system') and wall clock
            ('elapsed') seconds.
    """

    iterations: int
    burnin: int
    n_chains: int
    sampler: str
    runtime: Dict[str, float] = field(default_factory=lambda: {"user": 0.0, "system": 0.0, "elapsed": 0.0})


@dataclass
class BayesianSetup:
    """
    Everything needed to re-evaluate a calibration problem.

    Attributes:
        prior (UniformPrior): Prior over the calibrated parameters.
        names (List[str]): Calibrated parameter names.
        par_fixed (Dict[str, float]): Parameters held fixed.
        targets (List[str]): Target variables.
    """

    prior: UniformPrior
    names: List[str]
    par_fixed: Dict[str, float] = field(default_factory=dict)
    targets: List[str] = field(default_factory=lambda: ["gpp"])


@dataclass
class McmcSampler:
    """
    One independent MCMC chain (possibly made of several internal chains).

    Attributes:
        setup (BayesianSetup): The calibration problem.
        settings (ChainSettings): Sampler settings and runtime.
        trace (az.InferenceData): Posterior draws after burn-in.
    """

    setup: BayesianSetup
    settings: ChainSettings
    trace: az.InferenceData

    def get_sample(self, parameters_only: bool = True, thin: int = 1) -> np.ndarray:
        """
        Posterior draws of all internal chains, stacked.

        Args:
            parameters_only (bool): Only the calibrated parameters; otherwise the
                log-likelihood is appended as the last column.
            thin (int): Thinning rate.

        Returns:
            np.ndarray: Array of shape (n_draws, n_columns).
        """
        names = list(self.setup.names)
        if not parameters_only and "loglik" in self.trace.posterior:
            names.append("loglik")
        return np.stack([self.trace.posterior[p].values[:, ::thin].ravel() for p in names], axis=-1)


class McmcSamplerList(list):
    """
    Aggregate of independent chains.

    A plain list of `McmcSampler` objects that can also return the pooled
    posterior sample.
    """

    def get_sample(self, parameters_only: bool = True, thin: int = 1) -> np.ndarray:
        """Posterior draws of all chains, stacked in chain order."""
        if len(self) == 0:
            raise ValueError("Sampler list is empty")
        return np.concatenate([s.get_sample(parameters_only, thin) for s in self], axis=0)

    @property
    def parameter_names(self) -> List[str]:
        return list(self[0].setup.names) if len(self) else []

    def combined_trace(self) -> az.InferenceData:
        """All internal chains of all independent chains in one InferenceData."""
        traces = [s.trace for s in self]
        if len(traces) == 1:
            return traces[0]
        return az.concat(*traces, dim="chain", reset_dim=True)


@dataclass
class CalibrationOutput:
    """
    Result from a Bayesian calibration run.

    Attributes:
        mod (McmcSamplerList): Fitted independent chains.
        par (Dict[str, float]): Maximum a posteriori parameter values.
        name (Optional[str]): Experiment tag, assigned after the run.
        timestamp (str): Calibration timestamp in ISO format.
    """

    mod: Any
    par: Dict[str, float]
    name: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        """
        Summary of the result without the posterior draws.

        Returns:
            Dict[str, Any]: Name, MAP parameters and per-chain settings.
        """
        chains = self.mod if isinstance(self.mod, list) else [self.mod]
        return {
            "name": self.name,
            "par": self.par,
            "timestamp": self.timestamp,
            "chains": [
                {
                    "iterations": c.settings.iterations,
                    "burnin": c.settings.burnin,
                    "n_chains": c.settings.n_chains,
                    "sampler": c.settings.sampler,
                    "runtime": c.settings.runtime,
                }
                for c in chains
            ],
        }
