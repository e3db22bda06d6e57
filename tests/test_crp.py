"""
Tests for the Chinese Restaurant Process bookkeeping.
"""

import pytest

from classifier_consensus.crp import ChineseRestaurantProcess


class TestMembership:
    """Test seating and unseating members."""

    def test_empty_process_offers_only_new_cluster(self):
        crp = ChineseRestaurantProcess(alpha=2.5, n_members=3)

        assert crp.active_cluster_count() == 1
        assert crp.cluster_id_at(0) == 0
        assert crp.unnormalized_weight(crp.cluster_id_at(0)) == 2.5

    def test_add_members_to_one_cluster(self):
        crp = ChineseRestaurantProcess(alpha=1.0, n_members=4)
        for _ in range(3):
            crp.add_member(0)

        assert crp.active_cluster_count() == 2
        assert crp.cluster_id_at(0) == 0
        assert crp.cluster_id_at(1) == 1
        assert crp.unnormalized_weight(0) == 3.0
        assert crp.unnormalized_weight(1) == 1.0
        assert crp.cluster_sizes() == {0: 3}

    def test_emptied_cluster_is_retired_and_id_reused(self):
        crp = ChineseRestaurantProcess(alpha=1.0, n_members=3)
        crp.add_member(0)
        crp.add_member(1)
        crp.add_member(1)

        crp.remove_member(0)

        assert crp.active_clusters() == [1]
        assert crp.new_cluster_id() == 0
        assert crp.unnormalized_weight(0) == 1.0
        assert crp.cluster_sizes() == {1: 2}

    def test_new_cluster_slot_is_last_candidate(self):
        crp = ChineseRestaurantProcess(alpha=0.5, n_members=4)
        crp.add_member(0)
        crp.add_member(1)
        crp.add_member(2)
        crp.remove_member(1)

        candidates = [crp.cluster_id_at(k) for k in range(crp.active_cluster_count())]

        assert candidates == [0, 2, 1]

    def test_sizes_always_sum_to_members(self):
        crp = ChineseRestaurantProcess(alpha=1.0, n_members=5)
        for _ in range(5):
            crp.add_member(0)
        for target in [1, 2, 1, 3]:
            crp.remove_member(0)
            crp.add_member(target)

        assert sum(crp.cluster_sizes().values()) == 5
        assert crp.cluster_sizes() == {0: 1, 1: 2, 2: 1, 3: 1}


class TestContractViolations:
    """Test that bookkeeping errors are fatal."""

    def test_remove_from_empty_cluster(self):
        crp = ChineseRestaurantProcess(alpha=1.0, n_members=2)

        with pytest.raises(RuntimeError):
            crp.remove_member(0)

    def test_add_to_unknown_cluster(self):
        crp = ChineseRestaurantProcess(alpha=1.0, n_members=2)

        with pytest.raises(RuntimeError):
            crp.add_member(5)

    def test_no_free_id_left(self):
        crp = ChineseRestaurantProcess(alpha=1.0, n_members=2)
        crp.add_member(0)
        crp.add_member(1)

        with pytest.raises(RuntimeError):
            crp.new_cluster_id()

    @pytest.mark.parametrize("alpha", [0.0, -1.0])
    def test_alpha_must_be_positive(self, alpha):
        with pytest.raises(ValueError):
            ChineseRestaurantProcess(alpha=alpha, n_members=2)
