# pylint: disable=too-many-arguments
# pylint: disable=too-many-instance-attributes

from enum import Enum
from typing import List, Optional, Sequence

import numpy as np
from tqdm import tqdm

from classifier_consensus.likelihood import LikelihoodEvaluator
from classifier_consensus.samplers import gibbs_step
from classifier_consensus.state import DomainState
from classifier_consensus.store import PosteriorSummary, SampleStore
from classifier_consensus.utils import as_output_matrices


class Phase(Enum):
    BURN_IN = "burn_in"
    COLLECTING = "collecting"
    COMPLETE = "complete"


class BayesianConsensus:
    """
    Combines noisy binary classifiers into consensus labels without ground truth.

    A collapsed Gibbs sampler jointly infers a label prior and the latent label
    of every instance per domain, a Chinese Restaurant Process partition of the
    functions into clusters, and a confusion matrix per cluster.

    Args:
        function_outputs: One (instances x functions) binary matrix per domain.
        n_burn_in: Number of discarded sweeps before collection.
        n_thinning: Number of discarded sweeps between retained samples.
        n_samples: Number of retained samples.
        alpha: CRP concentration parameter, shared by every domain.
        seed: Seed expanded into one random stream per domain.
        labels_prior_alpha: Beta prior pseudo-count for label 1.
        labels_prior_beta: Beta prior pseudo-count for label 0.
    """

    def __init__(
        self,
        function_outputs: Sequence,
        n_burn_in: int,
        n_thinning: int,
        n_samples: int,
        alpha: float,
        seed: Optional[int] = None,
        labels_prior_alpha: float = 1.0,
        labels_prior_beta: float = 1.0,
    ):
        if n_burn_in < 0:
            raise ValueError(f"n_burn_in must be non-negative, got {n_burn_in}")
        if n_thinning < 0:
            raise ValueError(f"n_thinning must be non-negative, got {n_thinning}")
        if alpha <= 0:
            raise ValueError(f"alpha must be positive, got {alpha}")

        self.outputs = as_output_matrices(function_outputs)
        self.n_burn_in = n_burn_in
        self.n_thinning = n_thinning
        self.n_samples = n_samples
        self.alpha = alpha
        self.labels_prior_alpha = labels_prior_alpha
        self.labels_prior_beta = labels_prior_beta
        self.n_domains = len(self.outputs)
        self.n_functions = self.outputs[0].shape[1]

        self.store = SampleStore(
            n_samples, [outputs.shape[0] for outputs in self.outputs], self.n_functions
        )
        streams = np.random.SeedSequence(seed).spawn(self.n_domains + 1)
        self.domains = [
            DomainState(outputs, alpha, np.random.default_rng(stream))
            for outputs, stream in zip(self.outputs, streams)
        ]
        self._evaluation_rng = np.random.default_rng(streams[-1])
        self.phase = Phase.BURN_IN
        self._summary: Optional[PosteriorSummary] = None

    def sweep(self):
        """Run one Gibbs sweep over every domain."""
        gibbs_step(self.domains, self.labels_prior_alpha, self.labels_prior_beta)

    def run(self, verbose: bool = False, loading_bar: bool = False) -> PosteriorSummary:
        """
        Run burn-in and collection, then aggregate the retained samples.

        Args:
            verbose: Whether to print progress messages.
            loading_bar: Whether to show a progress bar over sweeps.

        Returns:
            Posterior means and variances of priors, labels and error rates.
        """
        if self.phase is not Phase.BURN_IN:
            raise RuntimeError(f"chain cannot be run from phase {self.phase.value}")

        if verbose:
            print(
                f"Burn-in: {self.n_burn_in} sweeps over {self.n_domains} domain(s) "
                f"and {self.n_functions} function(s)"
            )
        sweeps = range(self.n_burn_in)
        for _ in tqdm(sweeps) if loading_bar else sweeps:
            self.sweep()

        self.phase = Phase.COLLECTING
        if verbose:
            print(
                f"Collecting {self.n_samples} samples, "
                f"{self.n_thinning} thinning sweeps apart"
            )
        samples = range(self.n_samples)
        for _ in tqdm(samples) if loading_bar else samples:
            for _ in range(self.n_thinning + 1):
                self.sweep()
            self.store.record(self.domains)

        self._summary = self.store.summarize(self.outputs)
        self.phase = Phase.COMPLETE
        return self._summary

    @property
    def summary(self) -> PosteriorSummary:
        if self._summary is None:
            raise RuntimeError("the chain has not been run yet")
        return self._summary

    @property
    def prior_means(self) -> np.ndarray:
        return self.summary.prior_means

    @property
    def prior_variances(self) -> np.ndarray:
        return self.summary.prior_variances

    @property
    def label_means(self) -> List[np.ndarray]:
        return self.summary.label_means

    @property
    def label_variances(self) -> List[np.ndarray]:
        return self.summary.label_variances

    @property
    def error_rate_means(self) -> np.ndarray:
        return self.summary.error_rate_means

    @property
    def error_rate_variances(self) -> np.ndarray:
        return self.summary.error_rate_variances

    @property
    def cluster_count_means(self) -> np.ndarray:
        return self.summary.cluster_count_means

    def log_likelihood(self, function_outputs: Sequence) -> float:
        """
        Average log-likelihood of new outputs under the retained samples.

        Args:
            function_outputs: One binary matrix per domain with the same number
                of functions as the fitted data; instance counts may differ.

        Returns:
            Log-likelihood averaged over retained samples.
        """
        if self.phase is not Phase.COMPLETE:
            raise RuntimeError("the chain has not been run yet")
        outputs = as_output_matrices(function_outputs)
        if outputs[0].shape[1] != self.n_functions:
            raise ValueError(
                f"expected {self.n_functions} functions, got {outputs[0].shape[1]}"
            )
        evaluator = LikelihoodEvaluator(
            self.store,
            self._evaluation_rng,
            self.labels_prior_alpha,
            self.labels_prior_beta,
        )
        return evaluator.evaluate(outputs)
