from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from classifier_consensus.state import DomainState


@dataclass
class PosteriorSummary:
    """
    Posterior means and variances over the retained samples.

    Attributes:
        prior_means: Label prior mean per domain.
        prior_variances: Label prior variance per domain.
        label_means: Consensus label mean per domain, one array per domain.
        label_variances: Consensus label variance per domain.
        error_rate_means: Error rate mean, shape (n_domains, n_functions).
        error_rate_variances: Error rate variance, shape (n_domains, n_functions).
        cluster_count_means: Mean number of active clusters per domain.
    """

    prior_means: np.ndarray
    prior_variances: np.ndarray
    label_means: List[np.ndarray]
    label_variances: List[np.ndarray]
    error_rate_means: np.ndarray
    error_rate_variances: np.ndarray
    cluster_count_means: np.ndarray


def _mean_and_variance(samples: np.ndarray):
    mean = samples.sum(axis=0) / samples.shape[0]
    variance = ((samples - mean) ** 2).sum(axis=0) / samples.shape[0]
    return mean, variance


def error_rates(outputs: np.ndarray, labels: np.ndarray) -> np.ndarray:
    """
    Fraction of instances on which each function disagrees with the labels.

    Args:
        outputs: Binary outputs, shape (n_instances, n_functions).
        labels: Labels, shape (n_instances,) or (n_samples, n_instances).

    Returns:
        Error rates of shape (n_functions,) or (n_samples, n_functions).
    """
    return (outputs != labels[..., np.newaxis]).mean(axis=-2)


class SampleStore:
    """
    Pre-allocated slots for the retained samples of a chain.

    Slot ``s`` holds the label priors, confusion matrices, cluster assignments
    and labels of every domain as they were when sample ``s`` was taken.
    """

    def __init__(self, n_samples: int, n_instances: Sequence[int], n_functions: int):
        if n_samples < 1:
            raise ValueError(f"n_samples must be at least 1, got {n_samples}")
        n_domains = len(n_instances)
        self.n_samples = n_samples
        self.size = 0
        self.priors = np.empty((n_samples, n_domains))
        self.confusion = np.empty((n_samples, n_domains, n_functions, 2, 2))
        self.clusters = np.empty((n_samples, n_domains, n_functions), dtype=np.int64)
        self.cluster_counts = np.empty((n_samples, n_domains), dtype=np.int64)
        self.labels = [np.empty((n_samples, n), dtype=np.int64) for n in n_instances]

    @property
    def full(self) -> bool:
        return self.size == self.n_samples

    def record(self, domains: Sequence[DomainState]):
        """Copy the live state of every domain into the next free slot."""
        if self.full:
            raise IndexError(f"all {self.n_samples} sample slots are taken")
        s = self.size
        for p, domain in enumerate(domains):
            self.priors[s, p] = domain.prior
            self.confusion[s, p] = domain.confusion
            self.clusters[s, p] = domain.clusters
            self.cluster_counts[s, p] = domain.crp.active_cluster_count() - 1
            self.labels[p][s] = domain.labels
        self.size += 1

    def summarize(self, outputs: Sequence[np.ndarray]) -> PosteriorSummary:
        """
        Compute posterior means and then variances over the recorded samples.

        The error rate of a function in a sample is its empirical mismatch
        rate against that sample's labels.

        Args:
            outputs: Observed outputs of every domain.

        Returns:
            The posterior summary.
        """
        if self.size == 0:
            raise ZeroDivisionError("cannot summarize a chain with no retained samples")
        n = self.size
        prior_means, prior_variances = _mean_and_variance(self.priors[:n])
        label_means, label_variances = [], []
        rate_means, rate_variances = [], []
        for p, domain_outputs in enumerate(outputs):
            labels = self.labels[p][:n]
            mean, variance = _mean_and_variance(labels.astype(float))
            label_means.append(mean)
            label_variances.append(variance)
            mean, variance = _mean_and_variance(error_rates(domain_outputs, labels))
            rate_means.append(mean)
            rate_variances.append(variance)
        return PosteriorSummary(
            prior_means=prior_means,
            prior_variances=prior_variances,
            label_means=label_means,
            label_variances=label_variances,
            error_rate_means=np.array(rate_means),
            error_rate_variances=np.array(rate_variances),
            cluster_count_means=self.cluster_counts[:n].mean(axis=0),
        )
