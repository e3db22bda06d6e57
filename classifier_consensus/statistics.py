from typing import Union

import numpy as np

Instances = Union[int, np.ndarray]


class SufficientStatistics:
    """
    Counts that the Gibbs sweep reads instead of re-scanning the outputs.

    The object owns the latent labels and cluster assignments of one domain so
    that every change to them goes through a method that removes the old
    contribution before the change and adds the new one after it.

    Attributes:
        outputs: Observed function outputs, shape (n_instances, n_functions).
        labels: Current latent label of every instance.
        clusters: Current cluster id of every function.
        label_counts: Number of instances per label, shape (2,).
        confusion_counts: (instance, function) pair counts indexed by
            cluster id, true label and observed output, shape
            (n_functions, 2, 2).
    """

    def __init__(self, outputs: np.ndarray, labels: np.ndarray, clusters: np.ndarray):
        self.outputs = outputs
        self.labels = labels
        self.clusters = clusters
        self.label_counts = np.zeros(2, dtype=np.int64)
        self.confusion_counts = np.zeros((outputs.shape[1], 2, 2), dtype=np.int64)
        self.increment_label(np.arange(outputs.shape[0]))

    @property
    def n_instances(self) -> int:
        return self.outputs.shape[0]

    @property
    def n_functions(self) -> int:
        return self.outputs.shape[1]

    def _add_instances(self, instances: np.ndarray, delta: int):
        labels = self.labels[instances]
        np.add.at(self.label_counts, labels, delta)
        np.add.at(
            self.confusion_counts,
            (self.clusters[np.newaxis, :], labels[:, np.newaxis], self.outputs[instances]),
            delta,
        )

    def decrement_label(self, instances: Instances):
        """
        Remove the label and confusion contributions of the given instances.

        Args:
            instances: Instance index or array of indices.
        """
        self._add_instances(np.atleast_1d(instances), -1)

    def increment_label(self, instances: Instances):
        """
        Add the label and confusion contributions of the given instances.

        Args:
            instances: Instance index or array of indices.
        """
        self._add_instances(np.atleast_1d(instances), 1)

    def decrement_confusion(self, j: int, instances: Instances):
        """Remove the confusion cells of function ``j`` on the given instances."""
        instances = np.atleast_1d(instances)
        np.add.at(
            self.confusion_counts[self.clusters[j]],
            (self.labels[instances], self.outputs[instances, j]),
            -1,
        )

    def increment_confusion(self, j: int, instances: Instances):
        """Add the confusion cells of function ``j`` on the given instances."""
        instances = np.atleast_1d(instances)
        np.add.at(
            self.confusion_counts[self.clusters[j]],
            (self.labels[instances], self.outputs[instances, j]),
            1,
        )

    def relabel(self, instances: np.ndarray, new_labels: np.ndarray):
        """
        Move instances to new labels, keeping every count consistent.

        Args:
            instances: Indices of the instances to relabel.
            new_labels: New label for each of those instances.
        """
        if len(instances) == 0:
            return
        self.decrement_label(instances)
        self.labels[instances] = new_labels
        self.increment_label(instances)

    def reassign(self, j: int, cluster_id: int):
        """
        Move function ``j`` to another cluster, keeping every count consistent.
        """
        if self.clusters[j] == cluster_id:
            return
        everything = np.arange(self.n_instances)
        self.decrement_confusion(j, everything)
        self.clusters[j] = cluster_id
        self.increment_confusion(j, everything)

    def function_counts(self, j: int) -> np.ndarray:
        """
        Confusion counts contributed by function ``j`` alone.

        Returns:
            Array of shape (2, 2) indexed by true label and observed output.
        """
        cells = 2 * self.labels + self.outputs[:, j]
        return np.bincount(cells, minlength=4).reshape(2, 2)

    def copy(self) -> "SufficientStatistics":
        return SufficientStatistics(
            self.outputs, self.labels.copy(), self.clusters.copy()
        )
