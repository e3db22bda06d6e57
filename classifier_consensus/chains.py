# pylint: disable=too-many-arguments
# pylint: disable=protected-access

import atexit
import multiprocessing
import time
from multiprocessing import cpu_count
from typing import List, Sequence, Tuple

from joblib import Parallel, delayed

from classifier_consensus.combination import BayesianConsensus


def _cleanup_multiprocessing():
    """
    Force cleanup of multiprocessing resources on exit.
    """
    if hasattr(multiprocessing, "_cleanup"):
        multiprocessing._cleanup()


atexit.register(_cleanup_multiprocessing)


def run_chain(
    function_outputs: Sequence,
    n_burn_in: int,
    n_thinning: int,
    n_samples: int,
    alpha: float,
    seed: int,
    verbose: bool = False,
    loading_bar: bool = False,
) -> Tuple[BayesianConsensus, float]:
    """
    Fit a single chain.

    Args:
        function_outputs: One binary output matrix per domain.
        n_burn_in: Number of burn-in sweeps.
        n_thinning: Number of thinning sweeps between retained samples.
        n_samples: Number of retained samples.
        alpha: CRP concentration parameter.
        seed: Random seed for reproducibility.
        verbose: Whether to print verbose output.
        loading_bar: Whether to show progress bars during execution.

    Returns:
        Tuple of (model, runtime) where model holds the retained samples and
        posterior summary and runtime is the elapsed time in seconds.
    """
    t0 = time.perf_counter()
    model = BayesianConsensus(
        function_outputs, n_burn_in, n_thinning, n_samples, alpha, seed=seed
    )
    model.run(verbose=verbose, loading_bar=loading_bar)
    return model, time.perf_counter() - t0


def run_parallel_chains(
    function_outputs: Sequence,
    n_burn_in: int,
    n_thinning: int,
    n_samples: int,
    alpha: float,
    base_seed: int,
    n_chains: int = 4,
    verbose: bool = False,
    loading_bar: bool = False,
) -> Tuple[List[BayesianConsensus], List[float]]:
    """
    Fit several independent chains in parallel.

    Chains run in separate processes with joblib; chain ``c`` is seeded with
    ``base_seed + 1000 * c``.

    Args:
        function_outputs: One binary output matrix per domain.
        n_burn_in: Number of burn-in sweeps per chain.
        n_thinning: Number of thinning sweeps between retained samples.
        n_samples: Number of retained samples per chain.
        alpha: CRP concentration parameter.
        base_seed: Base seed to generate unique seeds for each chain.
        n_chains: Number of chains to run.
        verbose: Whether to print verbose output.
        loading_bar: Whether to show progress bars during execution.

    Returns:
        Tuple of (models, runtimes), one entry per chain.
    """
    seeds = [base_seed + i * 1000 for i in range(n_chains)]
    n_jobs = min(n_chains, cpu_count())
    if verbose:
        print(f"Running {n_chains} chains with joblib (backend: loky)...")
    results = Parallel(
        n_jobs=n_jobs,
        backend="loky",
        verbose=0,
        batch_size=1,
        pre_dispatch="2*n_jobs",
    )(
        delayed(run_chain)(
            function_outputs,
            n_burn_in,
            n_thinning,
            n_samples,
            alpha,
            seed,
            verbose,
            loading_bar,
        )
        for seed in seeds
    )

    models = [result[0] for result in results]
    runtimes = [result[1] for result in results]
    return models, runtimes
