# pylint: disable=too-many-locals

import math
from typing import List

import numpy as np
from numba import jit
from scipy.special import betaln, xlogy

from classifier_consensus.state import DomainState

# Beta prior on each confusion-matrix row, indexed by true label and output
CONFUSION_MATRIX_PRIOR = np.ones((2, 2))


@jit(nopython=True)
def sample_log_categorical(log_weights: np.ndarray, log_uniform: float) -> int:
    """
    Draw an index from unnormalized log-weights by inverse-CDF in log space.

    The cumulative log-sum-exp is accumulated after subtracting the maximum
    weight, and the target is ``log(u)`` plus the total log mass.

    Args:
        log_weights: Unnormalized log-weights of the candidates.
        log_uniform: Logarithm of a uniform variate in (0, 1).

    Returns:
        Index of the first candidate whose cumulative log-weight exceeds the target.
    """
    n = log_weights.shape[0]
    cdf = log_weights - np.max(log_weights)
    for k in range(1, n):
        cdf[k] = math.log(math.exp(cdf[k - 1]) + math.exp(cdf[k]))
    target = log_uniform + cdf[n - 1]
    for k in range(n - 1):
        if cdf[k] > target:
            return k
    return n - 1


def sample_prior(
    domain: DomainState, alpha0: float = 1.0, beta0: float = 1.0
) -> float:
    """
    Sample the label prior of a domain from its Beta posterior.

    Args:
        domain: Domain whose prior is resampled in place.
        alpha0: Prior pseudo-count for label 1.
        beta0: Prior pseudo-count for label 0.

    Returns:
        The new prior.
    """
    counts = domain.stats.label_counts
    domain.prior = domain.rng.beta(alpha0 + counts[1], beta0 + counts[0])
    return domain.prior


def draw_confusion_matrix(
    counts: np.ndarray, rng: np.random.Generator, prior: np.ndarray = CONFUSION_MATRIX_PRIOR
) -> np.ndarray:
    """
    Draw one 2x2 confusion matrix from the Beta posterior of its counts.

    The first column of each row is sampled and the second is its complement.

    Args:
        counts: Confusion counts, shape (2, 2).
        rng: Random number generator.
        prior: Beta pseudo-counts, shape (2, 2).

    Returns:
        Confusion matrix whose rows sum to one.
    """
    posterior = prior + counts
    first = rng.beta(posterior[:, 0], posterior[:, 1])
    return np.column_stack([first, 1.0 - first])


def sample_confusion_matrices(domain: DomainState):
    """Resample the confusion matrix of every active cluster of a domain."""
    for cluster_id in domain.crp.active_clusters():
        domain.confusion[cluster_id] = draw_confusion_matrix(
            domain.stats.confusion_counts[cluster_id], domain.rng
        )


def new_cluster_log_marginal(
    counts: np.ndarray, prior: np.ndarray = CONFUSION_MATRIX_PRIOR
) -> float:
    """
    Log marginal likelihood of one function's counts under a fresh cluster.

    The confusion matrix of a cluster that is not open yet is integrated out
    against its Beta prior, row by row.
    """
    return float(
        np.sum(betaln(prior[:, 0] + counts[:, 0], prior[:, 1] + counts[:, 1]))
        - np.sum(betaln(prior[:, 0], prior[:, 1]))
    )


def sample_cluster_assignments(domain: DomainState):
    """
    Resample the cluster of every function of a domain.

    Each function is unseated, scored against every active cluster (CRP weight
    times the likelihood of its own outputs under that cluster's confusion
    matrix) and against a new cluster (alpha times the marginal likelihood),
    then seated at the drawn candidate. A newly opened cluster gets a
    confusion matrix drawn from its posterior straight away.

    Args:
        domain: Domain whose assignments are resampled in place.
    """
    crp = domain.crp
    stats = domain.stats
    for j in range(domain.n_functions):
        crp.remove_member(int(stats.clusters[j]))
        counts = stats.function_counts(j)
        n_candidates = crp.active_cluster_count()
        candidates = [crp.cluster_id_at(k) for k in range(n_candidates)]

        log_weights = np.empty(n_candidates)
        for k, cluster_id in enumerate(candidates[:-1]):
            log_weights[k] = math.log(crp.unnormalized_weight(cluster_id)) + np.sum(
                xlogy(counts, domain.confusion[cluster_id])
            )
        log_weights[-1] = math.log(
            crp.unnormalized_weight(candidates[-1])
        ) + new_cluster_log_marginal(counts)

        k = sample_log_categorical(log_weights, math.log(domain.rng.random()))
        cluster_id = candidates[k]
        crp.add_member(cluster_id)
        stats.reassign(j, cluster_id)
        if k == n_candidates - 1:
            domain.confusion[cluster_id] = draw_confusion_matrix(
                stats.confusion_counts[cluster_id], domain.rng
            )


def label_probabilities(
    outputs: np.ndarray, prior: float, confusion: np.ndarray, clusters: np.ndarray
) -> np.ndarray:
    """
    Posterior probability of label 1 for every instance.

    Probabilities are multiplied directly rather than in log space, so
    instances scored by very many functions can underflow.

    Args:
        outputs: Binary outputs, shape (n_instances, n_functions).
        prior: Label prior P(label = 1).
        confusion: Confusion matrices indexed by cluster id.
        clusters: Cluster id of every function.

    Returns:
        Array of shape (n_instances,).
    """
    functions = confusion[clusters]
    columns = np.arange(len(clusters))
    p0 = (1.0 - prior) * np.prod(functions[columns, 0, outputs], axis=1)
    p1 = prior * np.prod(functions[columns, 1, outputs], axis=1)
    return p1 / (p0 + p1)


def draw_labels(
    outputs: np.ndarray,
    prior: float,
    confusion: np.ndarray,
    clusters: np.ndarray,
    rng: np.random.Generator,
) -> np.ndarray:
    """Draw a label for every instance from its Bernoulli conditional."""
    probabilities = label_probabilities(outputs, prior, confusion, clusters)
    return rng.binomial(1, probabilities).astype(np.int64)


def sample_labels(domain: DomainState):
    """Resample every instance label of a domain, updating counts for changes."""
    new_labels = draw_labels(
        domain.outputs, domain.prior, domain.confusion, domain.clusters, domain.rng
    )
    changed = np.flatnonzero(new_labels != domain.labels)
    domain.stats.relabel(changed, new_labels[changed])


def gibbs_step(domains: List[DomainState], alpha0: float = 1.0, beta0: float = 1.0):
    """
    Perform one sweep of the Gibbs sampler over all domains.

    Sequentially samples priors, confusion matrices, cluster assignments and
    labels.

    Args:
        domains: Live state of every domain, updated in place.
        alpha0: Prior pseudo-count for label 1.
        beta0: Prior pseudo-count for label 0.
    """
    for domain in domains:
        sample_prior(domain, alpha0, beta0)
    for domain in domains:
        sample_confusion_matrices(domain)
    for domain in domains:
        sample_cluster_assignments(domain)
    for domain in domains:
        sample_labels(domain)
