from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union
import time
import numpy as np
import pandas as pd

from ..core.base_calibrator import BaseCalibrator
from ..core.result import BayesianSetup, CalibrationOutput, ChainSettings, McmcSampler, McmcSamplerList
from ..likelihood import PModelLikelihood
from ..prior import UniformPrior
from ..sampling import create_sampler
from ..settings import CalibrationSettings, ExperimentSetup
from ...exceptions import CalibrationError, SettingsError
from pmodel_calibration.io.loaders.forcing_data import ForcingData, flatten_observations
from pmodel_calibration.io.persistence.results import save_calibration_output


class BayesianCalibrator(BaseCalibrator):
    """
    Bayesian calibration of P-model parameters by MCMC.

    Runs `settings.control.settings.n_chains` independent chains one after
    another; each is a single `pymc.sample` call with `start_value` internal
    chains.

    Args:
        model (Callable): The P-model runner, ``model(drivers, params) -> DataFrame``.
        verbose (bool): Whether to print progress. Defaults to True.
        sampler_kwargs (Optional[Dict[str, Any]]): Extra arguments for the
            sampler (e.g. ``{"scaling": 1e-2}`` for DEzs).
    """

    def __init__(
        self,
        model: Callable[[pd.DataFrame, Dict[str, float]], pd.DataFrame],
        verbose: bool = True,
        sampler_kwargs: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(model, verbose)
        self.sampler_kwargs = sampler_kwargs or {}

    def calibrate(
        self,
        drivers: ForcingData,
        obs: pd.DataFrame,
        settings: CalibrationSettings,
        par_fixed: Optional[Dict[str, float]] = None,
        targets: Optional[List[str]] = None,
    ) -> CalibrationOutput:
        if targets is None:
            targets = ["gpp"]
        par_fixed = dict(par_fixed or {})
        overlap = set(par_fixed) & set(settings.par.names)
        if overlap:
            raise SettingsError(f"Parameters both calibrated and fixed: {sorted(overlap)}")

        control = settings.control
        sampler = create_sampler(
            control.sampler, control.settings, cores=settings.cores, verbose=self.verbose, **self.sampler_kwargs
        )
        likelihood = PModelLikelihood(
            metric=settings.metric,
            parameter_names=settings.par.names,
            obs=flatten_observations(obs),
            drivers=drivers,
            targets=targets,
            simulator=self._create_simulator(par_fixed),
        )
        prior = UniformPrior.from_bounds(settings.par, seed=settings.seed)
        setup = BayesianSetup(prior=prior, names=settings.par.names, par_fixed=par_fixed, targets=list(targets))

        if self.verbose:
            print(f"Starting Bayesian calibration ({settings.method}, sampler {control.sampler})")
            print(f"  Sites: {len(drivers)}")
            print(f"  Calibrated parameters: {settings.par.names}")
            print(f"  Fixed parameters: {par_fixed}")
            print(
                f"  Chains: {control.settings.n_chains} x {control.settings.start_value} internal, "
                f"{control.settings.iterations} iterations, {control.settings.burnin} burn-in"
            )

        seeds = np.random.SeedSequence(settings.seed).generate_state(control.settings.n_chains)
        chains = McmcSamplerList()
        start_time = time.time()
        for i, seed in enumerate(seeds):
            if self.verbose:
                print(f"\nIndependent chain {i + 1}/{control.settings.n_chains}")
            trace, runtime = sampler.sample(likelihood, prior, seed=int(seed))
            chains.append(
                McmcSampler(
                    setup=setup,
                    settings=ChainSettings(
                        iterations=control.settings.iterations,
                        burnin=control.settings.burnin,
                        n_chains=control.settings.start_value,
                        sampler=control.sampler,
                        runtime=runtime,
                    ),
                    trace=trace,
                )
            )

        if self.verbose:
            print(f"\nCalibration complete in {time.time() - start_time:.1f}s ({likelihood.n_evaluations} model runs)")

        return CalibrationOutput(mod=chains, par=self._map_estimate(chains))

    def calibrate_experiment(self, drivers: ForcingData, setup: ExperimentSetup) -> CalibrationOutput:
        """
        Calibrate a named experiment and tag the result with its name.

        Args:
            drivers (ForcingData): Driver data; observations are derived from it.
            setup (ExperimentSetup): Settings, fixed parameters and targets.

        Returns:
            CalibrationOutput: The named result.
        """
        obs = drivers.validation_data(setup.targets)
        out = self.calibrate(drivers, obs, setup.settings, setup.par_fixed, setup.targets)
        out.name = setup.name
        return out

    def calibrate_by_case(
        self, drivers: ForcingData, setup: ExperimentSetup, output_dir: Union[str, Path] = "data"
    ) -> Path:
        """
        Calibrate one case (e.g. a single site) and write the result.

        Args:
            drivers (ForcingData): Drivers of the sites belonging to the case.
            setup (ExperimentSetup): Setup of the case; its name tags the output.
            output_dir (Union[str, Path]): Directory of the result file.

        Returns:
            Path: The written result file.
        """
        out = self.calibrate_experiment(drivers, setup)
        return save_calibration_output(out, output_dir)

    def _map_estimate(self, chains: McmcSamplerList) -> Dict[str, float]:
        """
        Posterior draw with the highest log-likelihood.

        Priors are uniform, so this is also the maximum a posteriori draw
        among the samples.
        """
        sample = chains.get_sample(parameters_only=False)
        if sample.shape[1] != len(chains.parameter_names) + 1:
            raise CalibrationError("Trace has no 'loglik' record; cannot determine the MAP estimate")
        loglik = sample[:, -1]
        if not np.any(np.isfinite(loglik)):
            raise CalibrationError("No posterior draw has a finite log-likelihood")
        best = int(np.nanargmax(np.where(np.isfinite(loglik), loglik, -np.inf)))
        return {name: float(val) for name, val in zip(chains.parameter_names, sample[best, :-1])}
