"""
MCMC samplers for P-model calibration.

The P-model is a black box to the sampler: its log-likelihood is wrapped
in a `pytensor` Op and added to a `pymc` model as a potential, next to
uniform priors on all calibrated parameters. The default sampler, "DEzs",
is the differential evolution MCMC with a Z-history of past states
described by ter Braak & Vrugt (2008), as implemented by
`pymc.DEMetropolisZ`.

References:

    ter Braak, C. J. F., & Vrugt, J. A. (2008).
      "Differential Evolution Markov Chain with snooker updater and fewer
      chains." Statistics and Computing, 18(4), 435-446.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple
import os
import numpy as np
import arviz as az
import pymc as pm
import pytensor.tensor as pt
from pytensor.graph.op import Op

from .prior import UniformPrior
from .settings import SamplerSettings
from ..exceptions import SettingsError


class BlackBoxLikelihood(Op):
    """
    A custom pytensor Op that calculates the log-likelihood of a vector of
    model parameters by calling an arbitrary Python function.

    Args:
        loglik (Callable): Function mapping a parameter vector to a scalar
            log-likelihood.
    """

    itypes = [pt.dvector]  # Expects a vector of parameter values when called
    otypes = [pt.dscalar]  # Outputs a single scalar value (the log likelihood)

    def __init__(self, loglik: Callable[[np.ndarray], float]):
        self.loglik = loglik

    def perform(self, node, inputs, outputs):
        (params,) = inputs
        outputs[0][0] = np.array(self.loglik(params), dtype=np.float64)


class Sampler(ABC):
    """
    Abstract base class for MCMC samplers.

    One call to `sample` produces one independent chain made of
    `settings.start_value` internal chains.

    Args:
        settings (SamplerSettings): Iterations, burn-in and chain counts.
        cores (int): Processes used for the internal chains. Defaults to 1.
        verbose (bool): Whether to show progress. Defaults to True.
    """

    name: str = ""

    def __init__(self, settings: SamplerSettings, cores: int = 1, verbose: bool = True):
        self.settings = settings
        self.cores = cores
        self.verbose = verbose

    @abstractmethod
    def _create_step(self):
        """Create the step method; called inside the model context."""
        pass

    def build_model(self, loglik: Callable[[np.ndarray], float], prior: UniformPrior) -> pm.Model:
        """
        Creates the pymc model: uniform priors plus the black-box likelihood.

        Args:
            loglik (Callable): Log-likelihood of a parameter vector.
            prior (UniformPrior): Bounds of the calibrated parameters.

        Returns:
            pm.Model
        """
        log_likelihood = BlackBoxLikelihood(loglik)
        with pm.Model() as model:
            theta = [
                pm.Uniform(name, lower=lower, upper=upper)
                for name, lower, upper in zip(prior.names, prior.lower, prior.upper)
            ]
            params = pt.as_tensor_variable(theta)
            loglik_var = log_likelihood(params)
            # Recorded with every draw to pick the maximum a posteriori.
            # The potential needs its own variable, registering the same one renames it.
            pm.Deterministic("loglik", loglik_var)
            pm.Potential("likelihood", loglik_var.copy())
        return model

    def sample(
        self, loglik: Callable[[np.ndarray], float], prior: UniformPrior, seed: Optional[int] = None
    ) -> Tuple[az.InferenceData, Dict[str, float]]:
        """
        Run one independent chain.

        Internal chains start from independent prior draws.

        Args:
            loglik (Callable): Log-likelihood of a parameter vector.
            prior (UniformPrior): Prior over the calibrated parameters.
            seed (Optional[int]): Seed for start values and the sampler.

        Returns:
            Tuple of the posterior trace (burn-in removed) and the runtime
            in seconds ('user', 'system', 'elapsed').
        """
        model = self.build_model(loglik, prior)
        rng = np.random.default_rng(seed)
        start_values = prior.sample(self.settings.start_value, rng=rng)
        initvals = [dict(zip(prior.names, row)) for row in start_values]
        sampler_seed = int(rng.integers(2**31 - 1))

        start = os.times()
        with model:
            step = self._create_step()
            trace = pm.sample(
                draws=self.settings.draws_per_chain,
                tune=self.settings.tune_per_chain,
                chains=self.settings.start_value,
                cores=self.cores,
                step=step,
                initvals=initvals,
                random_seed=sampler_seed,
                progressbar=self.verbose,
                compute_convergence_checks=False,
                return_inferencedata=True,
            )
        end = os.times()
        runtime = {
            "user": end.user - start.user,
            "system": end.system - start.system,
            "elapsed": end.elapsed - start.elapsed,
        }
        return trace, runtime


class DEzsSampler(Sampler):
    """
    Differential evolution MCMC with a Z-history (pymc.DEMetropolisZ).

    Args:
        settings (SamplerSettings): Sampler controls.
        cores (int): Processes used for the internal chains.
        verbose (bool): Show progress.
        tune (Optional[str]): Hyperparameter tuned during burn-in, 'lambda'
            (default), 'scaling' or None.
        scaling (float): Initial scale of the epsilon jitter. Defaults to 1e-3.
    """

    name = "DEzs"

    def __init__(
        self,
        settings: SamplerSettings,
        cores: int = 1,
        verbose: bool = True,
        tune: Optional[str] = "lambda",
        scaling: float = 1e-3,
    ):
        super().__init__(settings, cores, verbose)
        if tune not in ("lambda", "scaling", None):
            raise SettingsError(f"Unknown tuning target for DEzs: {tune}")
        self.tune = tune
        self.scaling = scaling

    def _create_step(self):
        return pm.DEMetropolisZ(tune=self.tune, scaling=self.scaling)


class DESampler(Sampler):
    """
    Population differential evolution MCMC (pymc.DEMetropolis).

    The proposal mixes the states of other internal chains, so at least
    three internal chains are required.
    """

    name = "DE"

    def __init__(self, settings: SamplerSettings, cores: int = 1, verbose: bool = True):
        super().__init__(settings, cores, verbose)
        if settings.start_value < 3:
            raise SettingsError("The DE sampler needs at least 3 internal chains (start_value >= 3)")

    def _create_step(self):
        return pm.DEMetropolis()


class MetropolisSampler(Sampler):
    """Adaptive random-walk Metropolis (pymc.Metropolis)."""

    name = "Metropolis"

    def _create_step(self):
        return pm.Metropolis()


def create_sampler(method: str, settings: SamplerSettings, **kwargs) -> Sampler:
    """Sampler factory."""
    m = {
        "dezs": DEzsSampler,
        "de": DESampler,
        "metropolis": MetropolisSampler,
    }
    if method.lower() not in m:
        raise ValueError(f"Unknown sampler: {method}. Available: {sorted(m)}")
    return m[method.lower()](settings, **kwargs)
