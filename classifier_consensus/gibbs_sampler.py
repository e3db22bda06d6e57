import argparse
import warnings
from pathlib import Path

import numpy as np

from classifier_consensus.chains import run_parallel_chains
from classifier_consensus.metrics import create_metrics
from classifier_consensus.plots import create_diagnostic_plots
from classifier_consensus.state import majority_vote
from classifier_consensus.utils import (
    add_gibbs_args,
    as_output_matrices,
    load_domains,
    print_consensus_summary,
    print_parameter_summary,
    print_runtime_summary,
)

warnings.filterwarnings("ignore", category=DeprecationWarning)


def main():
    ap = argparse.ArgumentParser(
        description="Bayesian combination of binary classifiers with a Dirichlet process prior"
    )

    add_gibbs_args(ap)

    args = ap.parse_args()

    dataset_dir = Path(args.data_dir) / args.data
    function_outputs = load_domains(dataset_dir)

    if args.verbose:
        print(f"Running {args.chains} Gibbs chains…")
    models, times = run_parallel_chains(
        function_outputs,
        args.n_burn_in,
        args.n_thinning,
        args.n_samples,
        args.alpha,
        args.seed,
        n_chains=args.chains,
        verbose=args.verbose,
        loading_bar=args.loading_bar,
    )

    chains_prior = [model.store.priors for model in models]
    chains_clusters = [model.store.cluster_counts.astype(float) for model in models]

    if not args.skip_plots:
        figure_dir = Path(args.figures_dir) / args.data
        create_diagnostic_plots(chains_prior, figure_dir, param_name="prior")
        create_diagnostic_plots(chains_clusters, figure_dir, param_name="clusters")

    prior_metrics = create_metrics(
        chains_prior, "prior", dataset_dir / "metrics.json", runtimes=times
    )
    cluster_metrics = create_metrics(
        chains_clusters, "clusters", dataset_dir / "metrics.json"
    )

    if args.score is not None:
        scored = load_domains(Path(args.data_dir) / args.score)
        scores = [model.log_likelihood(scored) for model in models]
        print(f"Log-likelihood of {args.score}: {np.mean(scores):.4f}")

    if args.verbose:
        print("\n=== GIBBS SUMMARY ===")
        print_parameter_summary("π", prior_metrics)
        print()
        print_parameter_summary("K", cluster_metrics)
        print()
        baseline = [majority_vote(outputs) for outputs in as_output_matrices(function_outputs)]
        print_consensus_summary(models[0].summary, baseline)

        print_runtime_summary(times)
        if not args.skip_plots:
            print(f"\nDiagnostic PNGs saved in {Path(args.figures_dir) / args.data}")


if __name__ == "__main__":
    main()
