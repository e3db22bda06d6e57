import bisect
from typing import Dict, List


class ChineseRestaurantProcess:
    """
    Chinese Restaurant Process bookkeeping for the functions of one domain.

    Cluster ids are small integers in ``[0, n_members)``. Ids of clusters that
    lose their last member go back to a free list and the smallest free id is
    the one offered as the "open a new cluster" candidate.

    Attributes:
        alpha: Concentration parameter.
        n_members: Number of functions that can be seated.
    """

    def __init__(self, alpha: float, n_members: int):
        if alpha <= 0:
            raise ValueError(f"alpha must be positive, got {alpha}")
        if n_members < 1:
            raise ValueError(f"n_members must be at least 1, got {n_members}")
        self.alpha = alpha
        self.n_members = n_members
        self._counts: Dict[int, int] = {}
        self._active: List[int] = []
        self._free: List[int] = list(range(n_members))

    def add_member(self, cluster_id: int):
        """
        Seat one member at a cluster, opening it if it is not active.

        Args:
            cluster_id: Id of an active cluster or of a free slot.
        """
        if cluster_id in self._counts:
            self._counts[cluster_id] += 1
            return
        index = bisect.bisect_left(self._free, cluster_id)
        if index == len(self._free) or self._free[index] != cluster_id:
            raise RuntimeError(f"cluster {cluster_id} is neither active nor free")
        del self._free[index]
        bisect.insort(self._active, cluster_id)
        self._counts[cluster_id] = 1

    def remove_member(self, cluster_id: int):
        """
        Unseat one member from a cluster, retiring the cluster when it empties.

        Args:
            cluster_id: Id of an active cluster.
        """
        count = self._counts.get(cluster_id, 0)
        if count <= 0:
            raise RuntimeError(f"cannot remove a member from empty cluster {cluster_id}")
        if count == 1:
            del self._counts[cluster_id]
            self._active.remove(cluster_id)
            bisect.insort(self._free, cluster_id)
        else:
            self._counts[cluster_id] = count - 1

    def active_cluster_count(self) -> int:
        """Number of populated clusters plus the new-cluster slot."""
        return len(self._active) + 1

    def cluster_id_at(self, index: int) -> int:
        """
        Id of the candidate at ``index``; the last index is the new-cluster slot.
        """
        if index == len(self._active):
            return self.new_cluster_id()
        return self._active[index]

    def new_cluster_id(self) -> int:
        if not self._free:
            raise RuntimeError("every cluster id is in use")
        return self._free[0]

    def unnormalized_weight(self, cluster_id: int) -> float:
        """
        CRP prior weight: the member count of an active cluster, alpha otherwise.
        """
        return float(self._counts.get(cluster_id, self.alpha))

    def active_clusters(self) -> List[int]:
        return list(self._active)

    def cluster_sizes(self) -> Dict[int, int]:
        return dict(self._counts)
