"""SSH client for running commands on cluster nodes."""

import io
from dataclasses import dataclass
from pathlib import Path

import paramiko
from paramiko import ssh_exception

from kopsdeployer.core.exceptions import SSHError
from kopsdeployer.utils.logging import get_logger

logger = get_logger(__name__)

_KEY_TYPES: tuple[type[paramiko.PKey], ...] = (
    paramiko.RSAKey,
    paramiko.ECDSAKey,
    paramiko.Ed25519Key,
)


def expand_home(path: str, home: str) -> str:
    """Expand a leading ~/ against an explicit home directory."""
    if path.startswith("~/"):
        return str(Path(home) / path[2:])
    return path


def parse_private_key(data: str) -> paramiko.PKey:
    """Parse a PEM/OpenSSH private key of any supported type.

    Raises:
        SSHError: If no key type accepts the data
    """
    for key_type in _KEY_TYPES:
        try:
            return key_type.from_private_key(io.StringIO(data))
        except (ssh_exception.SSHException, ValueError):
            continue
    raise SSHError("unsupported or malformed private key")


@dataclass(frozen=True)
class SSHClientConfig:
    """How to authenticate to nodes."""

    user: str
    key: paramiko.PKey
    port: int = 22
    timeout: float = 30.0


class SSHClientFactory:
    """Open SSH sessions to nodes with a shared config.

    Host keys are not verified: test nodes are created fresh for every run.
    """

    def __init__(self, ssh_config: SSHClientConfig):
        self.ssh_config = ssh_config

    def connect(self, host: str) -> paramiko.SSHClient:
        """Open an SSH connection to host.

        Raises:
            SSHError: If the connection cannot be established
        """
        ssh = paramiko.SSHClient()
        ssh.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        try:
            ssh.connect(
                host,
                port=self.ssh_config.port,
                username=self.ssh_config.user,
                pkey=self.ssh_config.key,
                timeout=self.ssh_config.timeout,
                allow_agent=False,
                look_for_keys=False,
            )
        except ssh_exception.AuthenticationException as e:
            ssh.close()
            raise SSHError(f"authentication to {host} failed: {e}") from e
        except (ssh_exception.SSHException, OSError) as e:
            ssh.close()
            raise SSHError(f"unable to connect to {host}: {e}") from e
        logger.debug("ssh_connected", host=host, user=self.ssh_config.user)
        return ssh

    @staticmethod
    def run(ssh: paramiko.SSHClient, command: str) -> tuple[int, bytes]:
        """Run a command on an open connection.

        Returns:
            Tuple of (exit status, stdout bytes)

        Raises:
            SSHError: If the command cannot be started
        """
        try:
            _, stdout, _ = ssh.exec_command(command)
            output = stdout.read()
            status = stdout.channel.recv_exit_status()
        except ssh_exception.SSHException as e:
            raise SSHError(f"error running {command!r}: {e}") from e
        return status, output
