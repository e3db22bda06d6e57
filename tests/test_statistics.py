"""
Tests for incrementally maintained sufficient statistics.
"""

import numpy as np

from classifier_consensus.statistics import SufficientStatistics
from conftest import recount


def make_statistics(rng, n_instances=20, n_functions=4, n_clusters=3):
    outputs = rng.integers(0, 2, (n_instances, n_functions)).astype(np.int8)
    labels = rng.integers(0, 2, n_instances)
    clusters = rng.integers(0, n_clusters, n_functions)
    return SufficientStatistics(outputs, labels, clusters)


def assert_consistent(stats):
    assert stats.label_counts.sum() == stats.n_instances
    assert stats.label_counts[1] == stats.labels.sum()
    expected = recount(stats.outputs, stats.labels, stats.clusters, stats.n_functions)
    np.testing.assert_array_equal(stats.confusion_counts, expected)


class TestSufficientStatistics:
    """Test count maintenance under label and cluster changes."""

    def test_initial_counts_match_recount(self, rng):
        stats = make_statistics(rng)

        assert_consistent(stats)

    def test_relabel_keeps_counts_consistent(self, rng):
        stats = make_statistics(rng)
        instances = np.array([0, 3, 4, 11])

        stats.relabel(instances, 1 - stats.labels[instances])

        assert_consistent(stats)

    def test_relabel_nothing_is_noop(self, rng):
        stats = make_statistics(rng)
        before = stats.confusion_counts.copy()

        stats.relabel(np.array([], dtype=np.int64), np.array([], dtype=np.int64))

        np.testing.assert_array_equal(stats.confusion_counts, before)

    def test_reassign_keeps_counts_consistent(self, rng):
        stats = make_statistics(rng)

        stats.reassign(2, 3)
        stats.reassign(0, 3)

        assert stats.clusters[2] == 3
        assert_consistent(stats)

    def test_decrement_then_increment_restores_counts(self, rng):
        stats = make_statistics(rng)
        before_labels = stats.label_counts.copy()
        before_confusion = stats.confusion_counts.copy()

        stats.decrement_label(5)
        assert stats.label_counts.sum() == stats.n_instances - 1
        stats.increment_label(5)
        stats.decrement_confusion(1, 7)
        stats.increment_confusion(1, 7)

        np.testing.assert_array_equal(stats.label_counts, before_labels)
        np.testing.assert_array_equal(stats.confusion_counts, before_confusion)

    def test_function_counts(self):
        outputs = np.array([[0, 1], [1, 1], [1, 0]], dtype=np.int8)
        labels = np.array([0, 1, 0])
        stats = SufficientStatistics(outputs, labels, np.array([0, 0]))

        np.testing.assert_array_equal(stats.function_counts(0), [[1, 1], [0, 1]])
        np.testing.assert_array_equal(stats.function_counts(1), [[1, 1], [0, 1]])
        np.testing.assert_array_equal(stats.confusion_counts[0], [[2, 2], [0, 2]])

    def test_copy_is_independent(self, rng):
        stats = make_statistics(rng)
        clone = stats.copy()

        clone.relabel(np.array([0]), np.array([1 - clone.labels[0]]))

        assert clone.labels[0] != stats.labels[0]
        assert_consistent(stats)
        assert_consistent(clone)
