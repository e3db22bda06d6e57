from pathlib import Path
from typing import List, Sequence

import numpy as np

DEFAULT_N_BURN_IN = 1000
DEFAULT_N_THINNING = 10
DEFAULT_N_SAMPLES = 200
DEFAULT_ALPHA = 1.0
DEFAULT_SEED = 0
DEFAULT_CHAINS = 4
DEFAULT_DATA_DIR = "data"
DEFAULT_FIGURES_DIR = "figures"


def as_output_matrices(function_outputs: Sequence) -> List[np.ndarray]:
    """Validate per-domain function outputs and convert them to integer matrices.

    Args:
        function_outputs: One (instances x functions) boolean or 0/1 matrix per
            domain, as arrays or nested sequences.

    Returns:
        List of int8 arrays of shape (n_instances, n_functions).

    Raises:
        ValueError: If there are no domains, a domain is empty or ragged,
            holds non-binary values, or the function counts differ.
    """
    if len(function_outputs) == 0:
        raise ValueError("at least one domain is required")

    matrices = []
    for p, domain in enumerate(function_outputs):
        if not isinstance(domain, np.ndarray):
            lengths = {len(row) for row in domain}
            if len(lengths) > 1:
                raise ValueError(
                    f"domain {p} has ragged instance vectors of lengths {sorted(lengths)}"
                )
        matrix = np.asarray(domain)
        if matrix.ndim != 2:
            raise ValueError(f"domain {p} must be a 2-D matrix, got {matrix.ndim} dimensions")
        if matrix.shape[0] == 0 or matrix.shape[1] == 0:
            raise ValueError(f"domain {p} must have instances and functions, got shape {matrix.shape}")
        if not np.isin(matrix, (0, 1)).all():
            raise ValueError(f"domain {p} contains non-binary outputs")
        matrices.append(matrix.astype(np.int8))

    n_functions = {matrix.shape[1] for matrix in matrices}
    if len(n_functions) > 1:
        raise ValueError(
            f"all domains must have the same number of functions, got {sorted(n_functions)}"
        )
    return matrices


def load_domains(data_dir: Path) -> List[np.ndarray]:
    """Load every ``domain_*.npy`` matrix in a directory, in domain order.

    Args:
        data_dir: Directory written by ``generate_data.save_data``.

    Returns:
        One boolean output matrix per domain.
    """
    files = sorted(
        Path(data_dir).glob("domain_*.npy"), key=lambda f: int(f.stem.split("_")[1])
    )
    if not files:
        raise FileNotFoundError(f"no domain_*.npy files in {data_dir}")
    return [np.load(f) for f in files]


def add_common_args(subparser):
    """Add common arguments to an argument parser.

    Args:
        subparser: ArgumentParser subparser to add arguments to
    """
    subparser.add_argument(
        "--data", type=str, default="example_1", help="Dataset name"
    )
    subparser.add_argument(
        "--data_dir", type=str, default=DEFAULT_DATA_DIR, help="Root data directory"
    )
    subparser.add_argument(
        "--verbose", action="store_true", help="Indicates if verbose output is desired"
    )
    subparser.add_argument(
        "--loading_bar", action="store_true", help="Show a progress bar over sweeps"
    )


def add_sampling_args(subparser):
    """Add sampling-related arguments to an argument parser.

    Args:
        subparser: ArgumentParser subparser to add arguments to
    """
    subparser.add_argument(
        "--n_burn_in", type=int, default=DEFAULT_N_BURN_IN, help="Burn-in sweeps"
    )
    subparser.add_argument(
        "--n_thinning",
        type=int,
        default=DEFAULT_N_THINNING,
        help="Discarded sweeps between retained samples",
    )
    subparser.add_argument(
        "--n_samples", type=int, default=DEFAULT_N_SAMPLES, help="Retained samples"
    )
    subparser.add_argument(
        "--alpha", type=float, default=DEFAULT_ALPHA, help="CRP concentration"
    )
    subparser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Random seed")


def add_chain_args(subparser):
    """Add chain-related arguments to an argument parser.

    Args:
        subparser: ArgumentParser subparser to add arguments to
    """
    subparser.add_argument(
        "--chains", type=int, default=DEFAULT_CHAINS, help="Number of chains"
    )


def add_output_args(subparser):
    """Add plotting and scoring arguments to an argument parser.

    Args:
        subparser: ArgumentParser subparser to add arguments to
    """
    subparser.add_argument(
        "--figures_dir",
        type=str,
        default=DEFAULT_FIGURES_DIR,
        help="Root directory for diagnostic PNGs",
    )
    subparser.add_argument(
        "--skip_plots", action="store_true", help="Do not write diagnostic plots"
    )
    subparser.add_argument(
        "--score",
        type=str,
        default=None,
        help="Dataset name whose outputs are scored against the fitted chain",
    )


def add_gibbs_args(subparser):
    """Add all arguments for the Gibbs sampler script.

    Args:
        subparser: ArgumentParser subparser to add arguments to
    """
    add_common_args(subparser)
    add_sampling_args(subparser)
    add_chain_args(subparser)
    add_output_args(subparser)


def print_parameter_summary(param_symbol, metrics):
    """Print formatted parameter summary statistics.

    Args:
        param_symbol: Symbol for the parameter (e.g., "π")
        metrics: Tuple of (mean_vals, rhat_vals, ess_vals, ci_lower, ci_upper)
    """
    mean_vals, rhat_vals, ess_vals, ci_lower, ci_upper = metrics
    print(f"Posterior mean {param_symbol}      :", np.round(mean_vals, 4))
    print(f"95% CI lower {param_symbol}        :", np.round(ci_lower, 4))
    print(f"95% CI upper {param_symbol}        :", np.round(ci_upper, 4))
    print(f"R‑hat ({param_symbol})             :", np.round(rhat_vals, 3))
    print(f"ESS  ({param_symbol})              :", np.round(ess_vals, 1))


def print_consensus_summary(summary, majority_labels):
    """Print per-domain error rates, cluster counts and agreement with majority vote.

    Args:
        summary: PosteriorSummary of one chain
        majority_labels: Majority-vote labels per domain
    """
    for p, (means, baseline) in enumerate(zip(summary.label_means, majority_labels)):
        agreement = np.mean((means >= 0.5) == baseline)
        print(f"Domain {p}:")
        print("  error rates        :", np.round(summary.error_rate_means[p], 4))
        print(f"  mean active clusters: {summary.cluster_count_means[p]:.2f}")
        print(f"  agreement with majority vote: {agreement:.2%}")


def print_runtime_summary(times):
    """Print runtime summary.

    Args:
        times: List of runtime values
    """
    print(f"\nMean runtime / chain: {np.mean(times):.2f}s")
