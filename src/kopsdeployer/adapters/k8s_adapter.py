"""Kubernetes adapter implementing ClusterHealth interface."""

import time

from kopsdeployer.clients.kubernetes_client import KubernetesClient
from kopsdeployer.core.exceptions import KubernetesError
from kopsdeployer.interfaces.cluster_health import ClusterHealth
from kopsdeployer.interfaces.exceptions import ClusterHealthError
from kopsdeployer.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 10.0


class KubernetesAdapter(ClusterHealth):
    """Adapter wrapping KubernetesClient to implement ClusterHealth."""

    def __init__(
        self,
        kubeconfig_path: str,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        client: KubernetesClient | None = None,
    ):
        """Initialize Kubernetes adapter.

        Args:
            kubeconfig_path: Path to the kubeconfig kops exports credentials into
            poll_interval: Pause between readiness polls (seconds)
            client: Existing client (optional)
        """
        self.client = client or KubernetesClient(kubeconfig_path=kubeconfig_path)
        self.poll_interval = poll_interval

    def wait_for_ready_nodes(
        self, desired_count: int, timeout: float, required_consecutive_successes: int
    ) -> None:
        """Poll until desired_count nodes are Ready on enough consecutive polls.

        A poll that errors or sees too few Ready nodes resets the streak, so a
        flapping API endpoint or DNS record cannot end the wait early.
        """
        deadline = time.monotonic() + timeout
        consecutive = 0

        logger.info(
            "waiting_for_ready_nodes",
            desired=desired_count,
            timeout_seconds=timeout,
            required_consecutive_successes=required_consecutive_successes,
        )

        while True:
            try:
                ready = self.client.count_ready_nodes()
            except KubernetesError as e:
                logger.info("node_readiness_poll_failed", error=str(e))
                ready = -1

            if ready >= desired_count:
                consecutive += 1
                logger.info(
                    "nodes_ready",
                    ready=ready,
                    desired=desired_count,
                    consecutive=consecutive,
                )
                if consecutive >= required_consecutive_successes:
                    return
            else:
                if consecutive:
                    logger.info("node_readiness_streak_reset", ready=ready, desired=desired_count)
                consecutive = 0

            if time.monotonic() >= deadline:
                raise ClusterHealthError(
                    f"waiting for ready nodes timed out after {timeout}s "
                    f"(wanted {desired_count} ready nodes)"
                )
            time.sleep(self.poll_interval)

    def is_up(self) -> None:
        try:
            nodes = self.client.get_nodes()
        except KubernetesError as e:
            raise ClusterHealthError(f"cluster API is not reachable: {e}") from e
        if not nodes:
            raise ClusterHealthError("cluster API reports no nodes")
        logger.info("cluster_is_up", nodes=len(nodes))
