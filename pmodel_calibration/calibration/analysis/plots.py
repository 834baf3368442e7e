"""
Diagnostic plots of Bayesian calibration results.

All functions return the figure object and leave saving to the caller
(see `save_figure`), so that they can be used in notebooks and scripts.
"""

from pathlib import Path
from typing import List, Optional, Union
import math
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
import arviz as az
from matplotlib.colors import to_hex, to_rgba

from .diagnostics import get_setup
from ..core.result import CalibrationOutput, McmcSampler, McmcSamplerList

POSTERIOR_COLOR = "#29a274ff"
PRIOR_COLOR = "#777055ff"


def transparent_color(color: str, percent: float = 50) -> str:
    """
    Make a color (semi-)transparent.

    Args:
        color (str): Any matplotlib color, e.g. 'red' or '#777055ff'.
        percent (float): Transparency in percent; 0 is opaque, 100 invisible.

    Returns:
        str: The color as '#rrggbbaa'.

    Raises:
        ValueError: If percent is outside [0, 100].
    """
    if not 0 <= percent <= 100:
        raise ValueError(f"percent must be within [0, 100], got {percent}")
    r, g, b, _ = to_rgba(color)
    return to_hex((r, g, b, (100 - percent) / 100), keep_alpha=True)


def prior_posterior_frame(
    sampler: Union[McmcSampler, McmcSamplerList],
    n_prior_draws: int = 10000,
    rng: Optional[Union[int, np.random.Generator]] = None,
) -> pd.DataFrame:
    """
    Posterior draws and fresh prior draws in long format.

    Args:
        sampler (Union[McmcSampler, McmcSamplerList]): Fitted chain(s).
        n_prior_draws (int): Number of prior draws. Defaults to 10000.
        rng: Optional seed or generator for the prior draws.

    Returns:
        pd.DataFrame: Columns 'variable', 'value' and 'distrib'
        ('posterior' or 'prior'), one row per draw and parameter.
    """
    setup = get_setup(sampler)
    names = list(setup.names)
    posterior = pd.DataFrame(sampler.get_sample(parameters_only=True), columns=names)
    prior = pd.DataFrame(setup.prior.sample(n_prior_draws, rng=rng), columns=names)

    frame = pd.concat(
        [posterior.assign(distrib="posterior"), prior.assign(distrib="prior")],
        ignore_index=True,
    )
    return frame.melt(id_vars="distrib", value_vars=names, var_name="variable", value_name="value")[
        ["variable", "value", "distrib"]
    ]


def plot_prior_posterior_density(
    sampler: Union[McmcSampler, McmcSamplerList],
    n_prior_draws: int = 10000,
    rng: Optional[Union[int, np.random.Generator]] = None,
    width: float = 6,
    height: float = 5,
) -> sns.FacetGrid:
    """
    Overlaid prior and posterior densities, one panel per parameter.

    Panels are laid out on two rows with free scales; the legend sits below
    the panels.

    Args:
        sampler (Union[McmcSampler, McmcSamplerList]): Fitted chain(s).
        n_prior_draws (int): Number of prior draws. Defaults to 10000.
        rng: Optional seed or generator for the prior draws.
        width (float): Figure width in inches.
        height (float): Figure height in inches.

    Returns:
        sns.FacetGrid: The plot.
    """
    df_plot = prior_posterior_frame(sampler, n_prior_draws, rng)
    n_par = df_plot["variable"].nunique()

    grid = sns.displot(
        data=df_plot,
        x="value",
        hue="distrib",
        col="variable",
        col_wrap=math.ceil(n_par / 2),
        kind="kde",
        fill=True,
        # Keep the alpha channel of the palette colours
        alpha=None,
        common_norm=False,
        hue_order=["posterior", "prior"],
        palette={"posterior": POSTERIOR_COLOR, "prior": transparent_color(PRIOR_COLOR)},
        facet_kws={"sharex": False, "sharey": False},
    )
    grid.set_titles("{col_name}")
    grid.set_axis_labels("", "density")
    grid.figure.set_size_inches(width, height)
    sns.move_legend(grid, "lower center", ncol=2, title=None, frameon=False)
    grid.figure.tight_layout(rect=(0, 0.06, 1, 1))
    return grid


def plot_mcmc_diagnostics(out: CalibrationOutput, var_names: Optional[List[str]] = None) -> plt.Figure:
    """
    Trace plots and marginal densities of all chains.

    Args:
        out (CalibrationOutput): The calibration result.
        var_names (Optional[List[str]]): Parameters to show; defaults to all
            calibrated parameters.

    Returns:
        plt.Figure: The figure holding the trace plots.
    """
    if var_names is None:
        var_names = out.mod.parameter_names
    axes = az.plot_trace(out.mod.combined_trace(), var_names=var_names, compact=False)
    fig = np.atleast_1d(axes).ravel()[0].figure
    fig.tight_layout()
    return fig


def save_figure(fig: Union[plt.Figure, sns.FacetGrid], path_stem: Union[str, Path], dpi: int = 300) -> List[Path]:
    """
    Write a figure as vector (.pdf) and raster (.png) file.

    Args:
        fig (Union[plt.Figure, sns.FacetGrid]): Figure or seaborn grid.
        path_stem (Union[str, Path]): Output path without suffix, e.g. 'fig/prior_posterior_s1'.
        dpi (int): Resolution of the raster file.

    Returns:
        List[Path]: The written files.
    """
    figure = fig.figure if isinstance(fig, sns.FacetGrid) else fig
    stem = Path(path_stem)
    stem.parent.mkdir(parents=True, exist_ok=True)
    paths = [stem.parent / f"{stem.name}.pdf", stem.parent / f"{stem.name}.png"]
    for path in paths:
        figure.savefig(path, dpi=dpi, bbox_inches="tight")
    return paths
