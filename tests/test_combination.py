"""
End-to-end tests for the Bayesian combination of classifiers.
"""

import numpy as np
import pytest

from classifier_consensus.combination import BayesianConsensus, Phase
from classifier_consensus.generate_data import generate_data
from classifier_consensus.state import majority_vote


class TestChainLifecycle:
    """Test phases, accessors and determinism."""

    def test_phase_moves_to_complete(self, mixed_data):
        model = BayesianConsensus(mixed_data[0], 5, 1, 5, alpha=1.0, seed=3)
        assert model.phase is Phase.BURN_IN

        model.run()

        assert model.phase is Phase.COMPLETE
        assert model.store.full
        assert model.prior_means.shape == (2,)
        assert model.prior_variances.shape == (2,)
        assert [len(m) for m in model.label_means] == [40, 40]
        assert [len(v) for v in model.label_variances] == [40, 40]
        assert model.error_rate_means.shape == (2, 4)
        assert model.error_rate_variances.shape == (2, 4)
        assert model.cluster_count_means.shape == (2,)

    def test_accessors_require_a_run(self, mixed_data):
        model = BayesianConsensus(mixed_data[0], 1, 0, 1, alpha=1.0, seed=0)

        with pytest.raises(RuntimeError):
            _ = model.prior_means
        with pytest.raises(RuntimeError):
            model.log_likelihood(mixed_data[0])

    def test_chain_cannot_run_twice(self, mixed_data):
        model = BayesianConsensus(mixed_data[0], 1, 0, 1, alpha=1.0, seed=0)
        model.run()

        with pytest.raises(RuntimeError):
            model.run()

    def test_same_seed_same_trajectory(self, mixed_data):
        first = BayesianConsensus(mixed_data[0], 10, 2, 10, alpha=2.0, seed=42)
        second = BayesianConsensus(mixed_data[0], 10, 2, 10, alpha=2.0, seed=42)
        first.run()
        second.run()

        np.testing.assert_array_equal(first.store.priors, second.store.priors)
        np.testing.assert_array_equal(first.store.confusion, second.store.confusion)
        np.testing.assert_array_equal(first.store.clusters, second.store.clusters)
        for a, b in zip(first.store.labels, second.store.labels):
            np.testing.assert_array_equal(a, b)


class TestPosterior:
    """Test the behaviour of the posterior on synthetic data."""

    def test_converges_on_independent_functions(self, independent_data):
        outputs, _ = independent_data
        model = BayesianConsensus(outputs, 100, 1, 50, alpha=1.0, seed=0)
        model.run()

        votes = outputs[0].sum(axis=1)
        unambiguous = (votes >= 5) | (votes <= 2)
        consensus = model.label_means[0] >= 0.5
        agreement = np.mean(consensus[unambiguous] == majority_vote(outputs[0])[unambiguous])

        assert agreement > 0.95
        np.testing.assert_allclose(model.error_rate_means[0], 0.1, atol=0.05)

    def test_single_function_single_instance(self):
        model = BayesianConsensus([[[True]]], 5, 0, 5, alpha=1.0, seed=0)
        model.run()

        assert 0.0 <= model.label_means[0][0] <= 1.0
        assert 0.0 < model.prior_means[0] < 1.0
        assert model.cluster_count_means[0] == 1.0

    def test_identical_functions_share_one_cluster(self):
        outputs, _ = generate_data(
            50, [0.1] * 5, n_domains=3, groups=[0] * 5, rng=np.random.default_rng(5)
        )
        model = BayesianConsensus(outputs, 50, 1, 50, alpha=1.0, seed=0)
        model.run()

        assert np.all(model.cluster_count_means < 1.5)

    def test_training_data_scores_higher_than_flipped(self):
        rng = np.random.default_rng(11)
        outputs, _ = generate_data(200, [0.1] * 5, rng=rng)
        flipped = [o ^ (rng.random(o.shape) < 0.3) for o in outputs]
        model = BayesianConsensus(outputs, 50, 1, 30, alpha=1.0, seed=0)
        model.run()

        assert model.log_likelihood(outputs) > model.log_likelihood(flipped)

    def test_log_likelihood_accepts_other_instance_counts(self, mixed_data):
        model = BayesianConsensus(mixed_data[0], 5, 0, 5, alpha=1.0, seed=0)
        model.run()
        new_outputs = [o[:7] for o in mixed_data[0]]

        assert np.isfinite(model.log_likelihood(new_outputs))


class TestValidation:
    """Test construction-time validation."""

    def test_zero_samples_fail_fast(self, mixed_data):
        with pytest.raises(ValueError):
            BayesianConsensus(mixed_data[0], 5, 0, 0, alpha=1.0)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"n_burn_in": -1, "n_thinning": 0, "alpha": 1.0},
            {"n_burn_in": 0, "n_thinning": -1, "alpha": 1.0},
            {"n_burn_in": 0, "n_thinning": 0, "alpha": 0.0},
        ],
    )
    def test_invalid_settings(self, mixed_data, kwargs):
        with pytest.raises(ValueError):
            BayesianConsensus(mixed_data[0], n_samples=1, **kwargs)

    def test_ragged_domain(self):
        with pytest.raises(ValueError):
            BayesianConsensus([[[True, False], [True]]], 1, 0, 1, alpha=1.0)

    def test_mismatched_function_counts(self):
        with pytest.raises(ValueError):
            BayesianConsensus(
                [np.ones((3, 2), dtype=bool), np.ones((3, 3), dtype=bool)],
                1,
                0,
                1,
                alpha=1.0,
            )

    def test_scoring_needs_same_function_count(self, mixed_data):
        model = BayesianConsensus(mixed_data[0], 1, 0, 1, alpha=1.0, seed=0)
        model.run()

        with pytest.raises(ValueError):
            model.log_likelihood([o[:, :2] for o in mixed_data[0]])
