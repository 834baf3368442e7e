"""
Descriptors and convergence diagnostics of calibration results.

`get_settings_str` derives the tag used in result file names, e.g.

    Setup-s1-Sampler-DEzs-50000iterations_ofwhich10000burnin_chains_3x3_
"""

from typing import Any, List, Union
import arviz as az
import pandas as pd

from ..core.result import BayesianSetup, CalibrationOutput, McmcSampler, McmcSamplerList
from ...exceptions import CalibrationError


def get_setup(x: Union[McmcSampler, McmcSamplerList]) -> BayesianSetup:
    """
    Calibration problem behind a sampler or a list of samplers.

    Raises:
        CalibrationError: If `x` is neither a sampler nor a non-empty sampler list.
    """
    if isinstance(x, McmcSamplerList):
        if len(x) == 0:
            raise CalibrationError("Sampler list is empty")
        return x[0].setup
    if isinstance(x, McmcSampler):
        return x.setup
    raise CalibrationError(f"Cannot derive a Bayesian setup from {type(x).__name__}")


def _distinct(values: List[Any]) -> str:
    # first-encounter order
    return "-".join(str(v) for v in dict.fromkeys(values))


def get_settings_str(out: CalibrationOutput) -> str:
    """
    Describe the sampler configuration of a calibration result.

    Where chains disagree on a setting, all distinct values are joined with
    '-' in the order they first occur.

    Args:
        out (CalibrationOutput): Result with `mod` holding a McmcSamplerList.

    Returns:
        str: The settings string, ending with '_'.

    Raises:
        CalibrationError: If `out.mod` is not a McmcSamplerList.
    """
    if not isinstance(out.mod, McmcSamplerList):
        raise CalibrationError(
            f"Settings string needs a McmcSamplerList, got {type(out.mod).__name__}"
        )
    chains = list(out.mod)
    internal = _distinct([c.settings.n_chains for c in chains])
    iterations = _distinct([c.settings.iterations for c in chains])
    burnin = _distinct([c.settings.burnin for c in chains])
    sampler = _distinct([c.settings.sampler for c in chains])
    return (
        f"Setup-{out.name}-Sampler-{sampler}-{iterations}iterations_ofwhich{burnin}burnin"
        f"_chains_{len(chains)}x{internal}_"
    )


def get_runtime(out: CalibrationOutput) -> str:
    """Total wall-clock time of all chains, e.g. 'Total runtime: 250 secs'."""
    total = sum(c.settings.runtime["elapsed"] for c in out.mod)
    return f"Total runtime: {total:.0f} secs"


def convergence_summary(out: CalibrationOutput, **kwargs: Any) -> pd.DataFrame:
    """
    Posterior summary over all internal chains of all independent chains.

    Args:
        out (CalibrationOutput): The calibration result.
        **kwargs (Any): Passed to `arviz.summary` (e.g. hdi_prob).

    Returns:
        pd.DataFrame: Mean, sd, HDI, MCSE, ESS and R-hat per parameter.
    """
    trace = out.mod.combined_trace()
    return az.summary(trace, var_names=out.mod.parameter_names, **kwargs)


def max_rhat(out: CalibrationOutput) -> float:
    """Largest Gelman-Rubin statistic over the calibrated parameters."""
    summary = convergence_summary(out, kind="diagnostics")
    return float(summary["r_hat"].max())
