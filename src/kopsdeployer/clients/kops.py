"""kops wrapper for cluster lifecycle operations."""

import os
import subprocess
from collections.abc import Mapping

from kopsdeployer.core.exceptions import KopsError
from kopsdeployer.utils.logging import get_logger

logger = get_logger(__name__)


class KopsWrapper:
    """Wrapper for the kops command-line tool."""

    def __init__(
        self,
        kops_path: str = "kops",
        env: Mapping[str, str] | None = None,
        priority_path: str = "",
    ):
        """Initialize kops wrapper.

        Args:
            kops_path: Path to the kops binary
            env: Variables added to the environment of every kops process
            priority_path: Directory prepended to PATH for kops processes (optional)
        """
        self.kops_path = kops_path
        self.env = dict(env or {})
        self.priority_path = priority_path

        logger.debug("kops_wrapper_initialized", kops_path=kops_path)

    def _process_env(self, extra_env: Mapping[str, str] | None) -> dict[str, str]:
        env = dict(os.environ)
        env.update(self.env)
        if extra_env:
            env.update(extra_env)
        if self.priority_path:
            env["PATH"] = os.pathsep.join([self.priority_path, env.get("PATH", "")])
        return env

    def run(
        self,
        args: list[str],
        extra_env: Mapping[str, str] | None = None,
        capture: bool = False,
    ) -> str:
        """Run a kops command and wait for it to finish.

        Args:
            args: Command arguments
            extra_env: Variables for this invocation only
            capture: Capture stdout instead of streaming it to our stdout

        Returns:
            Captured stdout ("" when not capturing)

        Raises:
            KopsError: If kops cannot be started or exits non-zero
        """
        cmd = [self.kops_path] + args

        logger.info("running_kops_command", command=" ".join(cmd))

        try:
            result = subprocess.run(
                cmd,
                env=self._process_env(extra_env),
                stdout=subprocess.PIPE if capture else None,
                stderr=subprocess.PIPE if capture else None,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            output = (e.stdout or "") + (e.stderr or "")
            logger.error(
                "kops_command_failed",
                command=" ".join(cmd),
                returncode=e.returncode,
                output=output,
            )
            raise KopsError(
                f"kops {' '.join(args)} exited with status {e.returncode}",
                command=cmd,
                returncode=e.returncode,
                output=output,
            ) from e
        except FileNotFoundError as e:
            logger.error("kops_not_found", kops_path=self.kops_path)
            raise KopsError(f"kops binary not found: {self.kops_path}", command=cmd) from e

        logger.debug("kops_command_completed", command=" ".join(cmd))
        return result.stdout if capture else ""

    def create_cluster(self, args: list[str], extra_env: Mapping[str, str] | None = None) -> None:
        """Run `kops create cluster` with prebuilt arguments."""
        self.run(args, extra_env=extra_env)

    def validate_cluster(self, cluster: str, wait: str = "15m") -> None:
        """Run `kops validate cluster`, waiting up to `wait` for it to pass."""
        self.run(["validate", "cluster", cluster, "--wait", wait])

    def export_kubecfg(self, cluster: str) -> None:
        """Write credentials for the cluster into $KUBECONFIG."""
        self.run(["export", "kubecfg", cluster])

    def get_cluster(self, cluster: str) -> None:
        """Run `kops get clusters`; raises KopsError when the cluster is unknown."""
        self.run(["get", "clusters", cluster])

    def delete_cluster(self, cluster: str) -> None:
        """Run `kops delete cluster --yes`."""
        self.run(["delete", "cluster", cluster, "--yes"])

    def toolbox_dump(self, cluster: str) -> str:
        """Get the JSON status dump of the cluster.

        Returns:
            Raw JSON output of `kops toolbox dump`
        """
        return self.run(["toolbox", "dump", "--name", cluster, "-ojson"], capture=True)
