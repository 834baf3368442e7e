"""
Global Bayesian calibration of the P-model against GPP.

Reads the training drivers written by the site sampling step, runs the
experiments s1 (reduced parameter set) and s2 (full parameter set) and
writes one result file per experiment to data/. With --plot, prior and
posterior densities and MCMC trace plots are written to fig/.

Usage:
    python scripts/run_bayesian_calibration.py mypackage.pmodel:run_pmodel [--plot]
"""

import argparse
import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
from pmodel_calibration import ForcingData, get_runtime, save_calibration_output
from pmodel_calibration.calibration import (
    Calibrator,
    convergence_summary,
    load_model,
    plot_mcmc_diagnostics,
    plot_prior_posterior_density,
    save_figure,
)

EXPERIMENTS = ["s1", "s2"]


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("model", help="P-model runner as 'module:function'")
    parser.add_argument("--drivers", default="data/drivers_train.pkl", help="Pickled driver table")
    parser.add_argument("--output-dir", default="data", help="Directory of the result files")
    parser.add_argument("--fig-dir", default="fig", help="Directory of the figures")
    parser.add_argument("--plot", action="store_true", help="Write diagnostic plots")
    args = parser.parse_args(argv)

    drivers = ForcingData.from_pickle(args.drivers)
    validation = drivers.validate(targets=["gpp"])
    if not validation.is_valid:
        validation.print_report()

    calibrator = Calibrator(load_model(args.model))

    for name in EXPERIMENTS:
        out = calibrator.run_experiment(drivers, name)
        path = save_calibration_output(out, args.output_dir)
        print(f"\nSaved {path}")
        print(get_runtime(out))
        print(convergence_summary(out))

        if args.plot:
            grid = plot_prior_posterior_density(out.mod)
            save_figure(grid, f"{args.fig_dir}/prior_posterior_{name}")
            plt.close(grid.figure)
            fig = plot_mcmc_diagnostics(out)
            save_figure(fig, f"{args.fig_dir}/traces_{name}")
            plt.close(fig)


if __name__ == "__main__":
    main()
