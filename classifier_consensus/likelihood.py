from typing import Sequence

import numpy as np

from classifier_consensus.samplers import CONFUSION_MATRIX_PRIOR, draw_labels
from classifier_consensus.state import majority_vote
from classifier_consensus.store import SampleStore


class LikelihoodEvaluator:
    """
    Scores new function outputs against the samples of a fitted chain.

    Labels of the new instances start from the majority vote and are redrawn
    once per retained sample from that sample's prior, confusion matrices and
    cluster assignments. The joint log-likelihood of the redrawn state is
    averaged over the samples.
    """

    def __init__(
        self,
        store: SampleStore,
        rng: np.random.Generator,
        labels_prior_alpha: float = 1.0,
        labels_prior_beta: float = 1.0,
    ):
        self.store = store
        self.rng = rng
        self.labels_prior_alpha = labels_prior_alpha
        self.labels_prior_beta = labels_prior_beta

    def sample_log_likelihood(
        self, s: int, p: int, outputs: np.ndarray, labels: np.ndarray
    ) -> float:
        """
        Joint log-likelihood of one domain under retained sample ``s``.

        Args:
            s: Sample index.
            p: Domain index.
            outputs: Binary outputs of the domain, shape (n_instances, n_functions).
            labels: Labels of the instances.

        Returns:
            Sum of the label-prior, partition, label, confusion-prior and
            output terms.
        """
        prior = self.store.priors[s, p]
        confusion = self.store.confusion[s, p]
        clusters = self.store.clusters[s, p]
        n_functions = len(clusters)

        log_likelihood = (self.labels_prior_alpha - 1) * np.log(prior) + (
            self.labels_prior_beta - 1
        ) * np.log(1 - prior)

        cluster_ids, inverse, sizes = np.unique(
            clusters, return_inverse=True, return_counts=True
        )
        log_likelihood += np.sum(np.log(sizes[inverse]) - np.log(n_functions))

        n_ones = labels.sum()
        log_likelihood += n_ones * np.log(prior) + (len(labels) - n_ones) * np.log(
            1 - prior
        )

        log_likelihood += np.sum(CONFUSION_MATRIX_PRIOR * np.log(confusion[cluster_ids]))

        observed = confusion[clusters, labels[:, np.newaxis], outputs]
        log_likelihood += np.sum(np.log(observed))
        return float(log_likelihood)

    def evaluate(self, function_outputs: Sequence[np.ndarray]) -> float:
        """
        Average joint log-likelihood of new outputs over the retained samples.

        Args:
            function_outputs: Validated integer output matrix per domain, with
                the same number of domains and functions as the fitted chain.

        Returns:
            The averaged log-likelihood.
        """
        if len(function_outputs) != self.store.priors.shape[1]:
            raise ValueError(
                f"expected {self.store.priors.shape[1]} domains, "
                f"got {len(function_outputs)}"
            )
        if self.store.size == 0:
            raise ZeroDivisionError("cannot score against a chain with no samples")
        labels = [majority_vote(outputs) for outputs in function_outputs]
        total = 0.0
        for s in range(self.store.size):
            for p, outputs in enumerate(function_outputs):
                labels[p] = draw_labels(
                    outputs,
                    self.store.priors[s, p],
                    self.store.confusion[s, p],
                    self.store.clusters[s, p],
                    self.rng,
                )
                total += self.sample_log_likelihood(s, p, outputs, labels[p])
        return total / self.store.size
