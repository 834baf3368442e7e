"""Likelihood module."""

from collections import OrderedDict
from typing import Callable, Dict, List, Sequence, Tuple, TYPE_CHECKING
import numpy as np
import pandas as pd
from scipy.stats import norm

from ..exceptions import CalibrationError

if TYPE_CHECKING:
    from pmodel_calibration.io.loaders.forcing_data import ForcingData
    from .core.simulator import PModelSimulator

ERROR_PREFIX = "err_"


def split_error_parameters(par: Dict[str, float]) -> Tuple[Dict[str, float], Dict[str, float]]:
    """
    Separate likelihood error terms ('err_<target>') from model parameters.

    Returns:
        Tuple of (model parameters, error parameters).
    """
    model_par = {k: v for k, v in par.items() if not k.startswith(ERROR_PREFIX)}
    error_par = {k: v for k, v in par.items() if k.startswith(ERROR_PREFIX)}
    return model_par, error_par


def cost_likelihood_pmodel(
    par: Dict[str, float],
    obs: pd.DataFrame,
    drivers: "ForcingData",
    targets: Sequence[str],
    simulator: "PModelSimulator",
) -> float:
    """
    Gaussian log-likelihood of observed targets given a P-model run.

    Every target needs a standard deviation parameter named 'err_<target>'.
    Predictions are joined to observations by site and date; pairs with a
    missing value on either side are dropped.

    Args:
        par (Dict[str, float]): Calibrated parameters, including 'err_*' terms.
        obs (pd.DataFrame): Long observations ('sitename', 'date', targets).
        drivers (ForcingData): Driver data passed on to the model.
        targets (Sequence[str]): Target variables, e.g. ['gpp'].
        simulator (PModelSimulator): Runs the model; adds fixed parameters.

    Returns:
        float: Sum of normal log-densities over all targets.

    Raises:
        CalibrationError: If an error parameter is missing or no observation
            overlaps with the model output.
    """
    model_par, error_par = split_error_parameters(par)
    for target in targets:
        if f"{ERROR_PREFIX}{target}" not in error_par:
            raise CalibrationError(f"Missing error parameter '{ERROR_PREFIX}{target}' for target '{target}'")

    predicted = simulator.simulate_with_parameters(model_par, drivers, list(targets))
    merged = obs.merge(predicted, on=["sitename", "date"], suffixes=("_obs", "_mod"))
    if merged.empty:
        raise CalibrationError("Model output does not overlap with the observations (joined on sitename, date)")

    loglik = 0.0
    for target in targets:
        observed = merged[f"{target}_obs"].to_numpy(dtype=float)
        modelled = merged[f"{target}_mod"].to_numpy(dtype=float)
        valid = ~(np.isnan(observed) | np.isnan(modelled))
        loglik += float(np.sum(norm.logpdf(observed[valid], loc=modelled[valid], scale=error_par[f"{ERROR_PREFIX}{target}"])))
    return loglik


class PModelLikelihood:
    """
    Log-likelihood of a parameter vector, as seen by the sampler.

    Maps the sampler's parameter vector onto named parameters and delegates
    to a metric with the signature of `cost_likelihood_pmodel`.

    Args:
        metric (Callable): Likelihood function.
        parameter_names (List[str]): Names of the entries of the parameter vector.
        obs (pd.DataFrame): Long observations.
        drivers (ForcingData): Driver data.
        targets (Sequence[str]): Target variables.
        simulator (PModelSimulator): Model runner.
    """

    CACHE_SIZE = 64

    def __init__(
        self,
        metric: Callable[..., float],
        parameter_names: List[str],
        obs: pd.DataFrame,
        drivers: "ForcingData",
        targets: Sequence[str],
        simulator: "PModelSimulator",
    ):
        self.metric = metric
        self.parameter_names = list(parameter_names)
        self.obs = obs
        self.drivers = drivers
        self.targets = list(targets)
        self.simulator = simulator
        self.n_evaluations = 0
        self._cache: "OrderedDict[bytes, float]" = OrderedDict()

    def __call__(self, x: np.ndarray) -> float:
        x = np.atleast_1d(np.asarray(x, dtype=float))
        # The sampler re-evaluates accepted states when recording draws
        key = x.tobytes()
        if key in self._cache:
            return self._cache[key]
        par = {name: float(val) for name, val in zip(self.parameter_names, x)}
        value = float(self.metric(par, self.obs, self.drivers, self.targets, self.simulator))
        self.n_evaluations += 1
        self._cache[key] = value
        if len(self._cache) > self.CACHE_SIZE:
            self._cache.popitem(last=False)
        return value
