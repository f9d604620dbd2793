"""Cluster health interface backed by the Kubernetes API."""

from abc import ABC, abstractmethod


class ClusterHealth(ABC):
    """Abstract interface for cluster reachability and node readiness."""

    @abstractmethod
    def wait_for_ready_nodes(
        self, desired_count: int, timeout: float, required_consecutive_successes: int
    ) -> None:
        """Block until enough nodes are Ready for enough polls in a row.

        Args:
            desired_count: Number of Ready nodes required
            timeout: Overall time limit (seconds)
            required_consecutive_successes: Polls in a row that must succeed

        Raises:
            ClusterHealthError: If the condition is not met before the timeout
        """

    @abstractmethod
    def is_up(self) -> None:
        """Check the API server answers and reports at least one node.

        Raises:
            ClusterHealthError: If the cluster is not reachable
        """
