"""Pytest configuration and shared fixtures."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from kopsdeployer.clients.kops import KopsWrapper
from kopsdeployer.clients.kubectl import KubectlWrapper
from kopsdeployer.core.config import DeployerConfig
from kopsdeployer.core.models import Provider
from kopsdeployer.deployer.external_ip import ExternalIPResolver
from kopsdeployer.deployer.kops_deployer import KopsDeployer
from kopsdeployer.interfaces.cluster_health import ClusterHealth
from kopsdeployer.interfaces.object_store import ObjectStore


@pytest.fixture
def kubeconfig_path(tmp_path: Path) -> Path:
    """Provide an empty kubeconfig file, as the factory creates it."""
    path = tmp_path / "kubeconfig"
    path.touch(mode=0o600)
    return path


@pytest.fixture
def aws_config(kubeconfig_path: Path) -> DeployerConfig:
    """Provide a resolved AWS deployer configuration."""
    return DeployerConfig(
        kops_path="/usr/local/bin/kops",
        cluster="e2e-test.k8s.local",
        zones=["us-east-1a"],
        provider=Provider.AWS,
        kubeconfig=str(kubeconfig_path),
        ssh_user="ubuntu",
        ssh_public_key="/home/prow/.ssh/kube_aws_rsa.pub",
        ssh_private_key="/home/prow/.ssh/kube_aws_rsa",
        state_store="s3://k8s-kops-prow",
    )


@pytest.fixture
def gce_config(kubeconfig_path: Path) -> DeployerConfig:
    """Provide a resolved GCE deployer configuration."""
    return DeployerConfig(
        kops_path="/usr/local/bin/kops",
        cluster="e2e-test.k8s.local",
        zones=["us-central1-c"],
        provider=Provider.GCE,
        kubeconfig=str(kubeconfig_path),
        gcp_project="k8s-e2e-project",
        ssh_public_key="/home/prow/.ssh/kube_aws_rsa.pub",
        ssh_private_key="/home/prow/.ssh/kube_aws_rsa",
        state_store="gs://k8s-e2e-project-state-1a2b",
    )


@pytest.fixture
def mock_kops() -> MagicMock:
    """Mock kops wrapper for testing."""
    return MagicMock(spec=KopsWrapper)


@pytest.fixture
def mock_kubectl() -> MagicMock:
    """Mock kubectl wrapper for testing."""
    return MagicMock(spec=KubectlWrapper)


@pytest.fixture
def mock_cluster_health() -> MagicMock:
    """Mock cluster health capability for testing."""
    return MagicMock(spec=ClusterHealth)


@pytest.fixture
def mock_object_store() -> MagicMock:
    """Mock object store capability for testing."""
    return MagicMock(spec=ObjectStore)


@pytest.fixture
def mock_ip_resolver() -> MagicMock:
    """Mock external IP resolver for testing."""
    resolver = MagicMock(spec=ExternalIPResolver)
    resolver.resolve_admin_access_cidr.return_value = "203.0.113.7/32"
    return resolver


@pytest.fixture
def make_deployer(
    mock_kops: MagicMock,
    mock_kubectl: MagicMock,
    mock_cluster_health: MagicMock,
    mock_ip_resolver: MagicMock,
    mock_object_store: MagicMock,
):
    """Build a KopsDeployer around mocked collaborators."""

    def _make(config: DeployerConfig, **kwargs) -> KopsDeployer:
        kwargs.setdefault("object_store", mock_object_store)
        return KopsDeployer(
            config=config,
            kops=mock_kops,
            kubectl=mock_kubectl,
            cluster_health=mock_cluster_health,
            ip_resolver=mock_ip_resolver,
            **kwargs,
        )

    return _make
