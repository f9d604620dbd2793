"""Unit tests for kubectl wrapper."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from kopsdeployer.clients.kubectl import KubectlWrapper
from kopsdeployer.core.exceptions import KubectlError


class TestConfigView:
    """Tests for KubectlWrapper.config_view."""

    @patch("kopsdeployer.clients.kubectl.subprocess.run")
    def test_config_view(self, mock_run: MagicMock) -> None:
        """Test the minified JSON view of one kubeconfig is requested."""
        mock_run.return_value = MagicMock(stdout='{"clusters": []}', returncode=0)

        output = KubectlWrapper().config_view("/tmp/kops1/kubeconfig")

        assert output == '{"clusters": []}'
        assert mock_run.call_args.args[0] == [
            "kubectl", "config", "view", "--minify", "-ojson",
            "--kubeconfig", "/tmp/kops1/kubeconfig",
        ]  # fmt: skip

    @patch("kopsdeployer.clients.kubectl.subprocess.run")
    def test_command_failure(self, mock_run: MagicMock) -> None:
        """Test non-zero exits become KubectlError."""
        mock_run.side_effect = subprocess.CalledProcessError(
            1, ["kubectl"], output="", stderr="error: current-context is not set"
        )

        with pytest.raises(KubectlError) as exc_info:
            KubectlWrapper().config_view("/tmp/kubeconfig")

        assert "current-context is not set" in str(exc_info.value)

    @patch("kopsdeployer.clients.kubectl.subprocess.run")
    def test_missing_binary(self, mock_run: MagicMock) -> None:
        """Test a missing kubectl binary becomes KubectlError."""
        mock_run.side_effect = FileNotFoundError("kubectl")

        with pytest.raises(KubectlError) as exc_info:
            KubectlWrapper("/opt/kubectl").config_view("/tmp/kubeconfig")

        assert "not found" in str(exc_info.value)
