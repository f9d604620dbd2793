"""Custom exceptions for the kops deployer."""


class KopsDeployerError(Exception):
    """Base exception for all deployer errors."""


class ConfigurationError(KopsDeployerError):
    """Invalid or missing settings, detected before any external call."""


class KopsError(KopsDeployerError):
    """A kops invocation failed.

    Attributes:
        command: Full command line that was run
        returncode: Exit status (None when the binary could not be started)
        output: Combined stdout/stderr of the process
    """

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        returncode: int | None = None,
        output: str = "",
    ):
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.output = output


class KubectlError(KopsDeployerError):
    """A kubectl invocation failed."""


class DeployerError(KopsDeployerError):
    """A lifecycle operation (up, down, test setup, ...) failed."""


class ZoneSelectionError(KopsDeployerError):
    """No region with enough availability zones could be found."""


class ExternalIPError(KopsDeployerError):
    """The external IP of this machine could not be determined."""


class KubernetesError(KopsDeployerError):
    """A Kubernetes API operation failed."""


class SSHError(KopsDeployerError):
    """An SSH connection or remote command failed."""
