"""
Calibration settings and experiment variants.

A calibration is configured by a `CalibrationSettings` object (method,
likelihood metric, sampler controls, prior bounds) and wrapped together
with the fixed parameters and targets in an `ExperimentSetup`:

    setup = create_experiment("s1")
    out = calibrator.calibrate(drivers, obs, setup.settings, setup.par_fixed, setup.targets)

The named variants reproduce the global calibrations of the GPP study:

- s1: reduced parameter set, GPP as the only target
- s2: full parameter set, GPP as the only target
- s3: full parameter set, GPP and leaf traits as targets (not available yet)
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
import copy

from .parameter_bounds import ParameterBounds
from .likelihood import cost_likelihood_pmodel
from ..exceptions import SettingsError


@dataclass
class SamplerSettings:
    """
    Numeric controls of the MCMC sampler.

    Attributes:
        burnin (int): Iterations discarded as burn-in, counted over all internal chains.
        iterations (int): Total iterations per independent chain, burn-in included.
        n_chains (int): Number of independent chains.
        start_value (int): Number of internal chains sampled per independent chain.
    """

    burnin: int = 10000
    iterations: int = 50000
    n_chains: int = 3
    start_value: int = 3

    def __post_init__(self):
        if self.n_chains < 1 or self.start_value < 1:
            raise SettingsError("n_chains and start_value must be at least 1")
        if not 0 <= self.burnin < self.iterations:
            raise SettingsError(f"burnin ({self.burnin}) must be in [0, iterations={self.iterations})")

    @property
    def draws_per_chain(self) -> int:
        """Kept draws per internal chain."""
        return max(1, (self.iterations - self.burnin) // self.start_value)

    @property
    def tune_per_chain(self) -> int:
        """Burn-in steps per internal chain."""
        return self.burnin // self.start_value


@dataclass
class ControlSettings:
    """Sampler choice and its numeric settings."""

    sampler: str = "DEzs"
    settings: SamplerSettings = field(default_factory=SamplerSettings)


@dataclass
class CalibrationSettings:
    """
    Complete configuration of one calibration run.

    Attributes:
        method (str): Calibration method identifier.
        metric (Callable): Likelihood function, see `cost_likelihood_pmodel`.
        control (ControlSettings): Sampler choice and controls.
        par (ParameterBounds): Bounds and initial values of calibrated parameters.
        seed (Optional[int]): Random seed of the run.
        cores (int): Processes used for the internal chains.
    """

    par: ParameterBounds
    method: str = "bayesian"
    metric: Callable[..., float] = cost_likelihood_pmodel
    control: ControlSettings = field(default_factory=ControlSettings)
    seed: Optional[int] = 1982
    cores: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "metric": getattr(self.metric, "__name__", repr(self.metric)),
            "control": {
                "sampler": self.control.sampler,
                "settings": {
                    "burnin": self.control.settings.burnin,
                    "iterations": self.control.settings.iterations,
                    "n_chains": self.control.settings.n_chains,
                    "start_value": self.control.settings.start_value,
                },
            },
            "par": self.par.to_dict(),
            "seed": self.seed,
        }


@dataclass
class ExperimentSetup:
    """
    A named calibration experiment.

    Attributes:
        name (str): Experiment tag, used in output file names.
        settings (CalibrationSettings): Calibration configuration.
        par_fixed (Dict[str, float]): Parameters held fixed.
        targets (List[str]): Observed variables the model is fitted to.

    Raises:
        SettingsError: If a parameter is both calibrated and fixed.
    """

    name: str
    settings: CalibrationSettings
    par_fixed: Dict[str, float] = field(default_factory=dict)
    targets: List[str] = field(default_factory=lambda: ["gpp"])

    def __post_init__(self):
        overlap = set(self.par_fixed) & set(self.settings.par.names)
        if overlap:
            raise SettingsError(f"Parameters both calibrated and fixed: {sorted(overlap)}")
        if not self.targets:
            raise SettingsError("At least one target is required")


# Prior bounds shared by all GPP-only variants
REDUCED_PARAMETERS: Dict[str, Dict[str, float]] = {
    "kphio": {"lower": 0.02, "upper": 0.15, "init": 0.05},
    "kphio_par_a": {"lower": -0.004, "upper": -0.001, "init": -0.0025},
    "kphio_par_b": {"lower": 10, "upper": 30, "init": 20},
    "soilm_thetastar": {"lower": 1, "upper": 250, "init": 40},
    "soilm_betao": {"lower": 0.0, "upper": 1.0, "init": 0.0},
    "err_gpp": {"lower": 0.1, "upper": 3, "init": 0.8},
}

FULL_PARAMETERS: Dict[str, Dict[str, float]] = {
    **REDUCED_PARAMETERS,
    "beta_unitcostratio": {"lower": 50, "upper": 250, "init": 146.0},
    "kc_jmax": {"lower": 0.1, "upper": 0.8, "init": 0.41},
    "tau_acclim": {"lower": 2, "upper": 100, "init": 20.0},
}

DEFAULT_FIXED_PARAMETERS: Dict[str, float] = {
    "beta_unitcostratio": 146.0,
    "kc_jmax": 0.41,
    "rd_to_vcmax": 0.014,
    "tau_acclim": 20.0,
}


def _settings(par: Dict[str, Dict[str, float]], sampler_settings: Optional[SamplerSettings] = None) -> CalibrationSettings:
    return CalibrationSettings(
        par=ParameterBounds.from_dict(par),
        control=ControlSettings(sampler="DEzs", settings=sampler_settings or SamplerSettings()),
    )


def reduced_setup(name: str = "s1", sampler_settings: Optional[SamplerSettings] = None) -> ExperimentSetup:
    """Global calibration of the reduced parameter set against GPP."""
    return ExperimentSetup(
        name=name,
        settings=_settings(REDUCED_PARAMETERS, sampler_settings),
        par_fixed=dict(DEFAULT_FIXED_PARAMETERS),
        targets=["gpp"],
    )


def full_setup(name: str = "s2", sampler_settings: Optional[SamplerSettings] = None) -> ExperimentSetup:
    """Global calibration of the full parameter set against GPP."""
    return ExperimentSetup(
        name=name,
        settings=_settings(FULL_PARAMETERS, sampler_settings),
        par_fixed={"rd_to_vcmax": DEFAULT_FIXED_PARAMETERS["rd_to_vcmax"]},
        targets=["gpp"],
    )


def multi_target_setup(name: str = "s3", sampler_settings: Optional[SamplerSettings] = None) -> ExperimentSetup:
    """
    Full parameter set against GPP and leaf traits (Vcmax:Jmax, ci:ca).

    Raises:
        NotImplementedError: Always; the trait datasets and the way their
            likelihoods combine with GPP are not defined yet.
    """
    raise NotImplementedError(
        f"Experiment '{name}' (GPP + leaf trait targets) is not available: "
        "trait target data and the combined likelihood are undefined"
    )


def site_setup(
    site_info: Dict[str, Any], name: str = "global", sampler_settings: Optional[SamplerSettings] = None
) -> ExperimentSetup:
    """
    Reduced-parameter calibration of a single site (or group of sites).

    The soil moisture threshold 'soilm_thetastar' is bounded by the site's
    water holding capacity: [0.01, 1.0] x whc, starting at 0.6 x whc.

    Args:
        site_info (Dict[str, Any]): Site metadata with a 'whc' entry (mm).
        name (str): Experiment tag.
        sampler_settings (Optional[SamplerSettings]): Sampler controls.

    Returns:
        ExperimentSetup: The site-specific setup.
    """
    if "whc" not in site_info:
        raise SettingsError(f"Site info for '{name}' has no 'whc' entry")
    whc = float(site_info["whc"])
    par = copy.deepcopy(REDUCED_PARAMETERS)
    par["soilm_thetastar"] = {"lower": 0.01 * whc, "upper": 1.0 * whc, "init": 0.6 * whc}
    return ExperimentSetup(
        name=name,
        settings=_settings(par, sampler_settings),
        par_fixed=dict(DEFAULT_FIXED_PARAMETERS),
        targets=["gpp"],
    )


EXPERIMENTS: Dict[str, Callable[..., ExperimentSetup]] = {
    "s1": reduced_setup,
    "s2": full_setup,
    "s3": multi_target_setup,
}


def create_experiment(name: str, sampler_settings: Optional[SamplerSettings] = None) -> ExperimentSetup:
    """Experiment factory."""
    if name not in EXPERIMENTS:
        raise ValueError(f"Unknown experiment: {name}. Available: {sorted(EXPERIMENTS)}")
    return EXPERIMENTS[name](name=name, sampler_settings=sampler_settings)
