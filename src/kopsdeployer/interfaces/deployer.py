"""Deployer capabilities exposed to the e2e harness."""

from abc import ABC, abstractmethod
from datetime import datetime

from kopsdeployer.core.models import BuildTesterOptions, GinkgoTester


class Deployer(ABC):
    """Lifecycle operations the harness drives for a test cluster."""

    @abstractmethod
    def up(self) -> None:
        """Create the cluster and wait until it is usable.

        Raises:
            DeployerError: If any step of bring-up fails
        """

    @abstractmethod
    def is_up(self) -> None:
        """Check that the cluster API is reachable and healthy.

        Raises:
            ClusterHealthError: If the cluster is not up
        """

    @abstractmethod
    def dump_cluster_logs(self, local_path: str, gcs_path: str) -> None:
        """Collect node and pod logs into local_path.

        Args:
            local_path: Directory to write logs into
            gcs_path: Upload destination chosen by the harness (may be empty)
        """

    @abstractmethod
    def test_setup(self) -> None:
        """Make sure credentials for the cluster are exported locally."""

    @abstractmethod
    def down(self) -> None:
        """Tear the cluster down. Must succeed when the cluster does not exist."""

    @abstractmethod
    def get_cluster_created(self, project: str) -> datetime:
        """Get the creation time of the cluster."""


class Publisher(ABC):
    """Deployers that publish a success marker after passing tests."""

    @abstractmethod
    def publish(self) -> None:
        """Publish the tested version to the configured destination."""


class TestBuilder(ABC):
    """Deployers that know how to configure the downstream e2e tester."""

    __test__ = False

    @abstractmethod
    def build_tester(self, options: BuildTesterOptions) -> GinkgoTester:
        """Build a tester configured for this cluster.

        Args:
            options: Harness options for the tester

        Returns:
            Tester configuration with endpoint, provider and zone filled in
        """
