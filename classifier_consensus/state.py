import numpy as np

from classifier_consensus.crp import ChineseRestaurantProcess
from classifier_consensus.statistics import SufficientStatistics


def majority_vote(outputs: np.ndarray) -> np.ndarray:
    """
    Label every instance with the majority output of the functions.

    Ties resolve to label 1.

    Args:
        outputs: Binary outputs, shape (n_instances, n_functions).

    Returns:
        Integer labels, shape (n_instances,).
    """
    votes = outputs.sum(axis=1)
    return (2 * votes >= outputs.shape[1]).astype(np.int64)


class DomainState:
    """
    Live state of the Gibbs chain for one domain.

    Starts from the majority-vote labels with every function seated in
    cluster 0.

    Attributes:
        outputs: Observed function outputs, shape (n_instances, n_functions).
        prior: Current label prior P(label = 1).
        confusion: Confusion matrices indexed by cluster id, true label and
            observed output, shape (n_functions, 2, 2). Only rows of active
            clusters are meaningful.
        crp: Cluster bookkeeping for the functions of this domain.
        stats: Sufficient statistics, owner of the labels and assignments.
        rng: Random stream reserved for this domain.
    """

    def __init__(self, outputs: np.ndarray, alpha: float, rng: np.random.Generator):
        self.outputs = outputs
        n_functions = outputs.shape[1]
        self.prior = 0.5
        self.confusion = np.full((n_functions, 2, 2), 0.5)
        self.crp = ChineseRestaurantProcess(alpha, n_functions)
        clusters = np.zeros(n_functions, dtype=np.int64)
        for cluster_id in clusters:
            self.crp.add_member(int(cluster_id))
        self.stats = SufficientStatistics(outputs, majority_vote(outputs), clusters)
        self.rng = rng

    @property
    def labels(self) -> np.ndarray:
        return self.stats.labels

    @property
    def clusters(self) -> np.ndarray:
        return self.stats.clusters

    @property
    def n_instances(self) -> int:
        return self.outputs.shape[0]

    @property
    def n_functions(self) -> int:
        return self.outputs.shape[1]
