"""kubectl wrapper for reading kubeconfig files."""

import subprocess

from kopsdeployer.core.exceptions import KubectlError
from kopsdeployer.utils.logging import get_logger

logger = get_logger(__name__)


class KubectlWrapper:
    """Wrapper for the kubectl command-line tool."""

    def __init__(self, kubectl_path: str = "kubectl"):
        self.kubectl_path = kubectl_path

    def _run_command(self, args: list[str]) -> str:
        cmd = [self.kubectl_path] + args

        logger.debug("running_kubectl_command", command=" ".join(cmd))

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=True)
        except subprocess.CalledProcessError as e:
            logger.error(
                "kubectl_command_failed",
                command=" ".join(cmd),
                returncode=e.returncode,
                stderr=e.stderr,
            )
            raise KubectlError(f"kubectl command failed: {e.stderr or e.stdout}") from e
        except FileNotFoundError as e:
            logger.error("kubectl_not_found")
            raise KubectlError("kubectl command not found. Please install kubectl.") from e

        return result.stdout

    def config_view(self, kubeconfig_path: str) -> str:
        """Get the minified kubeconfig of a single file as JSON.

        Args:
            kubeconfig_path: kubeconfig file to read

        Returns:
            Raw JSON output of `kubectl config view`

        Raises:
            KubectlError: If kubectl fails
        """
        return self._run_command(
            ["config", "view", "--minify", "-ojson", "--kubeconfig", kubeconfig_path]
        )
