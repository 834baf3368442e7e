"""
Bayesian calibration framework for the P-model.

Provides settings assembly for the calibration experiments, MCMC sampling
of the model parameters and post-processing of the posterior.
"""

from pathlib import Path
from typing import Optional, Union

from .core.base_calibrator import BaseCalibrator
from .core.result import CalibrationOutput, ChainSettings, BayesianSetup, McmcSampler, McmcSamplerList
from .core.simulator import PModelSimulator, load_model
from .methods.bayesian import BayesianCalibrator
from .parameter_bounds import ParameterBounds, ParameterBound
from .prior import UniformPrior
from .likelihood import cost_likelihood_pmodel, PModelLikelihood
from .sampling import create_sampler, DEzsSampler, DESampler, MetropolisSampler
from .settings import (
    SamplerSettings,
    ControlSettings,
    CalibrationSettings,
    ExperimentSetup,
    create_experiment,
    site_setup,
)
from .analysis.diagnostics import get_setup, get_settings_str, get_runtime, convergence_summary, max_rhat
from .analysis.plots import (
    transparent_color,
    prior_posterior_frame,
    plot_prior_posterior_density,
    plot_mcmc_diagnostics,
    save_figure,
)


class Calibrator:
    """
    Orchestration layer for calibration workflows.

    Provides a simplified interface for running the named experiments
    ('s1', 's2') or per-site calibrations on a set of drivers.

    Args:
        model: The P-model runner, ``model(drivers, params) -> DataFrame``.
        verbose (bool): Whether to enable verbose logging. Defaults to True.
    """

    def __init__(self, model, verbose: bool = True):
        self.model = model
        self.verbose = verbose
        self.bayesian_calibrator = BayesianCalibrator(model, verbose)

    def run_experiment(
        self, drivers, experiment: Union[str, ExperimentSetup], sampler_settings: Optional[SamplerSettings] = None
    ) -> CalibrationOutput:
        """
        Run one named experiment against the GPP observations in the drivers.

        Args:
            drivers (ForcingData): Driver data of all sites.
            experiment (Union[str, ExperimentSetup]): Experiment name or setup.
            sampler_settings (Optional[SamplerSettings]): Overrides the sampler
                defaults when the experiment is given by name.

        Returns:
            CalibrationOutput: The named result.
        """
        setup = experiment
        if isinstance(experiment, str):
            setup = create_experiment(experiment, sampler_settings)
        return self.bayesian_calibrator.calibrate_experiment(drivers, setup)

    def run_by_site(
        self,
        drivers,
        sampler_settings: Optional[SamplerSettings] = None,
        output_dir: Union[str, Path] = "data",
    ) -> dict:
        """
        Calibrate every site on its own, with site-specific soil moisture bounds.

        Args:
            drivers (ForcingData): Driver data; each site needs 'site_info' with 'whc'.
            sampler_settings (Optional[SamplerSettings]): Sampler controls.
            output_dir (Union[str, Path]): Directory of the result files.

        Returns:
            dict: Mapping of site name to the written result file.
        """
        paths = {}
        for sitename in drivers.sites:
            setup = site_setup(drivers.get_site_info(sitename), name=sitename, sampler_settings=sampler_settings)
            paths[sitename] = self.bayesian_calibrator.calibrate_by_case(
                drivers.subset([sitename]), setup, output_dir
            )
        return paths


__all__ = [
    "BaseCalibrator",
    "BayesianCalibrator",
    "Calibrator",
    "CalibrationOutput",
    "ChainSettings",
    "BayesianSetup",
    "McmcSampler",
    "McmcSamplerList",
    "PModelSimulator",
    "load_model",
    "ParameterBounds",
    "ParameterBound",
    "UniformPrior",
    "cost_likelihood_pmodel",
    "PModelLikelihood",
    "create_sampler",
    "DEzsSampler",
    "DESampler",
    "MetropolisSampler",
    "SamplerSettings",
    "ControlSettings",
    "CalibrationSettings",
    "ExperimentSetup",
    "create_experiment",
    "site_setup",
    "get_setup",
    "get_settings_str",
    "get_runtime",
    "convergence_summary",
    "max_rhat",
    "transparent_color",
    "prior_posterior_frame",
    "plot_prior_posterior_density",
    "plot_mcmc_diagnostics",
    "save_figure",
]
