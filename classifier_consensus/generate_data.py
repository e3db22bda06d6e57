# pylint: disable=too-many-arguments

import argparse
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np

from classifier_consensus.utils import DEFAULT_DATA_DIR


def generate_data(
    n_instances: int,
    error_rates: Sequence[float],
    n_domains: int = 1,
    prior: float = 0.5,
    groups: Optional[Sequence[int]] = None,
    rng: Optional[np.random.Generator] = None,
) -> Tuple[List[np.ndarray], List[np.ndarray]]:
    """
    Generate noisy binary classifier outputs with known true labels.

    Every function flips the true label with its own error rate. Functions
    that share a group share their flip decisions, so a group of functions
    with equal error rates produces identical outputs.

    Args:
        n_instances: Number of instances per domain.
        error_rates: Error rate of each function.
        n_domains: Number of domains.
        prior: Probability that a true label is 1.
        groups: Group index of each function; independent functions if None.
        rng: Random number generator.

    Returns:
        Tuple of (outputs, labels): one boolean matrix of shape
        (n_instances, n_functions) and one label vector per domain.

    Raises:
        ValueError: If the error rates or groups are invalid.
    """
    error_rates = np.asarray(error_rates, dtype=float)
    if np.any((error_rates < 0) | (error_rates > 1)):
        raise ValueError("The error rates must lie in [0, 1]")
    if not 0 <= prior <= 1:
        raise ValueError("The prior must lie in [0, 1]")
    n_functions = len(error_rates)
    if groups is None:
        groups = np.arange(n_functions)
    groups = np.asarray(groups)
    if len(groups) != n_functions:
        raise ValueError("The lengths of error_rates and groups must be equal")
    rng = rng if rng is not None else np.random.default_rng()

    _, group_index = np.unique(groups, return_inverse=True)
    n_groups = group_index.max() + 1

    outputs, labels = [], []
    for _ in range(n_domains):
        truth = rng.random(n_instances) < prior
        noise = rng.random((n_instances, n_groups))[:, group_index]
        flips = noise < error_rates[np.newaxis, :]
        outputs.append(truth[:, np.newaxis] ^ flips)
        labels.append(truth.astype(np.int64))
    return outputs, labels


def save_data(
    name: str,
    outputs: Sequence[np.ndarray],
    labels: Sequence[np.ndarray],
    data_dir: str = DEFAULT_DATA_DIR,
) -> Path:
    """
    Save one ``domain_<p>.npy`` output matrix and ``labels_<p>.npy`` per domain.

    Returns:
        The dataset directory.
    """
    dataset_dir = Path(data_dir) / name
    dataset_dir.mkdir(parents=True, exist_ok=True)
    for p, (domain_outputs, domain_labels) in enumerate(zip(outputs, labels)):
        np.save(dataset_dir / f"domain_{p}.npy", domain_outputs)
        np.save(dataset_dir / f"labels_{p}.npy", domain_labels)
    return dataset_dir


def main():
    ap = argparse.ArgumentParser(description="Generate synthetic classifier outputs")
    ap.add_argument(
        "--data_dir", type=str, default=DEFAULT_DATA_DIR, help="Root data directory"
    )
    ap.add_argument("--seed", type=int, default=0, help="Random seed")
    args = ap.parse_args()

    rng = np.random.default_rng(args.seed)

    # independent functions with a shared error rate
    outputs, labels = generate_data(500, [0.1] * 5, rng=rng)
    save_data("example_1", outputs, labels, args.data_dir)

    # three domains, mixed error rates
    outputs, labels = generate_data(
        300, [0.05, 0.1, 0.2, 0.3, 0.4], n_domains=3, prior=0.3, rng=rng
    )
    save_data("example_2", outputs, labels, args.data_dir)

    # two blocks of perfectly correlated functions
    outputs, labels = generate_data(
        200,
        [0.1, 0.1, 0.1, 0.25, 0.25, 0.25],
        n_domains=2,
        groups=[0, 0, 0, 1, 1, 1],
        rng=rng,
    )
    save_data("example_3", outputs, labels, args.data_dir)


if __name__ == "__main__":
    main()
