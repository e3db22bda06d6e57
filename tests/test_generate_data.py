"""
Tests for synthetic classifier outputs.
"""

import numpy as np
import pytest

from classifier_consensus.generate_data import generate_data, save_data
from classifier_consensus.utils import load_domains


class TestGenerateData:
    """Test the synthetic data generator."""

    def test_shapes(self, rng):
        outputs, labels = generate_data(30, [0.1, 0.2, 0.3], n_domains=2, rng=rng)

        assert len(outputs) == len(labels) == 2
        assert outputs[0].shape == (30, 3)
        assert outputs[0].dtype == bool
        assert labels[1].shape == (30,)

    def test_error_rates_are_respected(self, rng):
        outputs, labels = generate_data(20000, [0.0, 0.1, 0.4], rng=rng)

        observed = (outputs[0] != labels[0][:, np.newaxis]).mean(axis=0)

        np.testing.assert_allclose(observed, [0.0, 0.1, 0.4], atol=0.015)

    def test_grouped_functions_are_identical(self, rng):
        outputs, _ = generate_data(100, [0.2] * 4, groups=[0, 1, 0, 1], rng=rng)

        np.testing.assert_array_equal(outputs[0][:, 0], outputs[0][:, 2])
        np.testing.assert_array_equal(outputs[0][:, 1], outputs[0][:, 3])
        assert not np.array_equal(outputs[0][:, 0], outputs[0][:, 1])

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"error_rates": [1.5]},
            {"error_rates": [0.1], "prior": 2.0},
            {"error_rates": [0.1, 0.2], "groups": [0]},
        ],
    )
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(ValueError):
            generate_data(10, **kwargs)

    def test_save_and_load(self, rng, tmp_path):
        outputs, labels = generate_data(10, [0.1, 0.2], n_domains=12, rng=rng)

        dataset_dir = save_data("example", outputs, labels, str(tmp_path))
        loaded = load_domains(dataset_dir)

        assert len(loaded) == 12
        for original, restored in zip(outputs, loaded):
            np.testing.assert_array_equal(original, restored)
