import numpy as np
import pytest

from classifier_consensus.generate_data import generate_data


def recount(outputs, labels, clusters, n_clusters):
    """Confusion counts rebuilt from scratch with plain loops."""
    counts = np.zeros((n_clusters, 2, 2), dtype=np.int64)
    for i in range(outputs.shape[0]):
        for j in range(outputs.shape[1]):
            counts[clusters[j], labels[i], outputs[i, j]] += 1
    return counts


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def independent_data():
    """One domain, seven independent functions with error rate 0.1."""
    outputs, labels = generate_data(
        300, [0.1] * 7, rng=np.random.default_rng(0)
    )
    return outputs, labels


@pytest.fixture
def mixed_data():
    """Two domains with heterogeneous error rates."""
    outputs, labels = generate_data(
        40, [0.05, 0.2, 0.35, 0.1], n_domains=2, rng=np.random.default_rng(7)
    )
    return outputs, labels
