"""Unit tests for custom exceptions."""

import pytest

from kopsdeployer.core.exceptions import (
    ConfigurationError,
    DeployerError,
    ExternalIPError,
    KopsDeployerError,
    KopsError,
    KubectlError,
    KubernetesError,
    SSHError,
    ZoneSelectionError,
)
from kopsdeployer.interfaces.exceptions import (
    ClusterHealthError,
    ComputeProviderError,
    HTTPFetchError,
    InterfaceError,
    LogDumpError,
    ObjectStoreError,
)


class TestExceptionHierarchy:
    """Tests for exception hierarchy and inheritance."""

    @pytest.mark.parametrize(
        "exc_class",
        [
            ConfigurationError,
            DeployerError,
            ExternalIPError,
            KopsError,
            KubectlError,
            KubernetesError,
            SSHError,
            ZoneSelectionError,
        ],
    )
    def test_core_exceptions_inherit_from_base(self, exc_class: type[Exception]) -> None:
        """Test core exceptions share one base class."""
        assert issubclass(exc_class, KopsDeployerError)

    @pytest.mark.parametrize(
        "exc_class",
        [ClusterHealthError, ComputeProviderError, HTTPFetchError, LogDumpError, ObjectStoreError],
    )
    def test_capability_exceptions_inherit_from_interface_error(
        self, exc_class: type[Exception]
    ) -> None:
        """Test capability exceptions share one base class."""
        assert issubclass(exc_class, InterfaceError)
        assert not issubclass(exc_class, KopsDeployerError)


class TestKopsError:
    """Tests for KopsError details."""

    def test_details(self) -> None:
        """Test command, exit code and output are kept."""
        error = KopsError(
            "kops get clusters x exited with status 1",
            command=["kops", "get", "clusters", "x"],
            returncode=1,
            output="cluster not found",
        )

        assert str(error) == "kops get clusters x exited with status 1"
        assert error.command == ["kops", "get", "clusters", "x"]
        assert error.returncode == 1
        assert error.output == "cluster not found"

    def test_defaults(self) -> None:
        """Test missing details default to empty values."""
        error = KopsError("kops binary not found")

        assert error.command == []
        assert error.returncode is None
        assert error.output == ""


class TestLogDumpError:
    """Tests for LogDumpError."""

    def test_failed_nodes(self) -> None:
        """Test failed node addresses are kept."""
        error = LogDumpError("2 nodes failed", failed_nodes=["10.0.0.1", "10.0.0.2"])

        assert error.failed_nodes == ["10.0.0.1", "10.0.0.2"]
        assert LogDumpError("x").failed_nodes == []
