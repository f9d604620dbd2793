"""Main CLI entry point for the kops deployer."""

from __future__ import annotations

import signal
import sys
from collections.abc import Callable
from pathlib import Path
from types import FrameType
from typing import TYPE_CHECKING, Any

import click
from rich.console import Console

from kopsdeployer import __version__
from kopsdeployer.core.exceptions import ConfigurationError, KopsDeployerError
from kopsdeployer.interfaces.exceptions import InterfaceError
from kopsdeployer.utils.logging import (
    bind_run_context,
    clear_run_context,
    get_logger,
    log_error,
    setup_logging,
)

if TYPE_CHECKING:
    from kopsdeployer.core.config import KopsOptions
    from kopsdeployer.deployer.factory import Collaborators
    from kopsdeployer.deployer.kops_deployer import KopsDeployer

console = Console(stderr=True)
logger = get_logger(__name__)


class DeployerContext:
    """Shared context for CLI commands with lazy initialization.

    Nothing external is touched until a command asks for the deployer.
    """

    def __init__(
        self,
        config_path: str | None,
        overrides: dict[str, Any],
        logging_from_file: bool = False,
    ):
        """Initialize context.

        Args:
            config_path: Optional YAML options file
            overrides: Options given on the command line, taking precedence over the file
            logging_from_file: Reconfigure logging from the file's logging section once loaded
        """
        self.config_path = config_path
        self.overrides = overrides
        self.logging_from_file = logging_from_file
        self._options: KopsOptions | None = None
        self._collaborators: Collaborators | None = None
        self._deployer: KopsDeployer | None = None

    @property
    def options(self) -> KopsOptions:
        """Get or load options lazily."""
        if self._options is None:
            from pydantic import ValidationError

            from kopsdeployer.core.config import KopsOptions

            if self.config_path:
                self._options = KopsOptions.from_file(self.config_path, **self.overrides)
                if self.logging_from_file:
                    setup_logging(**self._options.logging.model_dump())
            else:
                try:
                    self._options = KopsOptions(**self.overrides)
                except ValidationError as e:
                    raise ConfigurationError(f"Invalid options: {e}") from e

            # each command runs in its own process: keep the run's kubeconfig and
            # state bucket where the next command finds them
            cluster = self._options.kops_cluster or self._options.cluster
            if not self._options.run_dir and cluster:
                run_dir = Path(click.get_app_dir("kops-deployer")) / "runs" / cluster
                self._options = self._options.model_copy(update={"run_dir": str(run_dir)})
        return self._options

    @property
    def collaborators(self) -> Collaborators:
        """Default capabilities, shared so the interrupt event is reachable."""
        if self._collaborators is None:
            from kopsdeployer.deployer.factory import Collaborators

            self._collaborators = Collaborators()
        return self._collaborators

    @property
    def deployer(self) -> KopsDeployer:
        """Get or create the deployer lazily."""
        if self._deployer is None:
            from kopsdeployer.deployer.factory import create_deployer

            self._deployer = create_deployer(self.options, collaborators=self.collaborators)
        return self._deployer


def _run(ctx: click.Context, operation: str, action: Callable[[KopsDeployer], None]) -> None:
    """Run one deployer operation, turning deployer failures into exit code 1."""
    deployer_ctx: DeployerContext = ctx.obj
    bind_run_context(operation=operation)
    try:
        action(deployer_ctx.deployer)
    except (KopsDeployerError, InterfaceError) as e:
        log_error(logger, e, operation=operation)
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    finally:
        clear_run_context()


@click.group()
@click.version_option(version=__version__)
@click.option("--config", type=click.Path(exists=True), help="Path to a YAML options file")
@click.option("--provider", type=click.Choice(["aws", "gce"]), help="Cloud provider")
@click.option("--gcp-project", help="GCP project (gce provider)")
@click.option("--cluster", help="Cluster name")
@click.option("--kops", "kops_path", help="Path to the kops binary; downloaded when unset")
@click.option("--kops-cluster", help="Deprecated. Cluster name, overrides --cluster")
@click.option("--kops-state", "state", envvar="KOPS_STATE_STORE",
              help="kops state store; on gce a bucket is allocated when unset")
@click.option("--kops-ssh-user", "ssh_user", envvar="USER", help="Username for SSH to nodes")
@click.option("--kops-ssh-key", "ssh_key", envvar="AWS_SSH_KEY", help="Private SSH key path")
@click.option("--kops-ssh-public-key", "ssh_public_key", help="Public SSH key path")
@click.option("--kops-kubernetes-version", "kubernetes_version", help="Kubernetes version")
@click.option("--kops-zones", "zones", help="Comma separated zones")
@click.option("--kops-nodes", "nodes", type=int, help="Number of worker nodes")
@click.option("--kops-up-timeout", "up_timeout", type=float, help="Readiness timeout (seconds)")
@click.option("--kops-admin-access", "admin_access", help="CIDR allowed to reach the cluster")
@click.option("--kops-image", "image", help="Node image")
@click.option("--kops-args", "args", help="Extra space separated 'kops create cluster' args")
@click.option("--kops-priority-path", "priority_path", envvar="PRIORITY_PATH",
              help="Directory prepended to PATH for kops")
@click.option("--kops-base-url", "base_url", help="Base URL of a kops build")
@click.option("--kops-version", "version_url", help="URL of a file holding a kops base URL")
@click.option("--kops-disk-size", "disk_size", type=int, help="Root disk size (GB)")
@click.option("--kops-publish", "publish", help="gs:// object to publish the tested version to")
@click.option("--kops-master-size", "master_size", help="Control plane instance type")
@click.option("--kops-master-count", "master_count", type=int, help="Control plane node count")
@click.option("--kops-dns-provider", "dns_provider", help="DNS provider override")
@click.option("--kops-etcd-version", "etcd_version", help="etcd version override")
@click.option("--kops-network-mode", "network_mode", help="Networking mode")
@click.option("--kops-overrides", "overrides", help="Comma separated cluster spec overrides")
@click.option("--kops-feature-flags", "feature_flags", help="Comma separated kops feature flags")
@click.option("--kops-multiple-zones", "multiple_zones", is_flag=True,
              help="Spread the cluster over several zones of one region")
@click.option("--run-dir", "run_dir", envvar="KOPS_RUN_DIR", type=click.Path(file_okay=False),
              help="Directory shared by the commands of one cluster run "
              "[default: per-cluster directory under the user app dir]")
@click.option("--log-level", help="Log level [default: INFO]")
@click.option("--log-format", type=click.Choice(["console", "json"]),
              help="Log format [default: console]")
@click.pass_context
def cli(
    ctx: click.Context,
    config: str | None,
    log_level: str | None,
    log_format: str | None,
    **options: Any,
) -> None:
    """Bring up, test and tear down Kubernetes clusters with kops."""
    setup_logging(level=log_level or "INFO", format=log_format or "console")

    # unset options and a missing --kops-multiple-zones flag leave the file values alone
    overrides = {
        name: value for name, value in options.items() if value is not None and value is not False
    }
    ctx.obj = DeployerContext(
        config_path=config,
        overrides=overrides,
        logging_from_file=log_level is None and log_format is None,
    )


@cli.command()
@click.pass_context
def up(ctx: click.Context) -> None:
    """Create the cluster and wait until it is ready."""
    _run(ctx, "up", lambda deployer: deployer.up())
    console.print("[bold green]✓ Cluster is up[/bold green]")


@cli.command()
@click.pass_context
def down(ctx: click.Context) -> None:
    """Delete the cluster and its state store bucket."""
    _run(ctx, "down", lambda deployer: deployer.down())
    console.print("[bold green]✓ Cluster is down[/bold green]")


@cli.command(name="is-up")
@click.pass_context
def is_up(ctx: click.Context) -> None:
    """Check that the cluster API answers with at least one node."""
    _run(ctx, "is_up", lambda deployer: deployer.is_up())
    console.print("[green]Cluster is up[/green]")


@cli.command(name="test-setup")
@click.pass_context
def test_setup(ctx: click.Context) -> None:
    """Export the cluster kubeconfig."""
    _run(ctx, "test_setup", lambda deployer: deployer.test_setup())


@cli.command(name="dump-logs")
@click.argument("local_path", type=click.Path(file_okay=False))
@click.option("--gcs-path", default="", help="Remote location the harness uploads logs to")
@click.pass_context
def dump_logs(ctx: click.Context, local_path: str, gcs_path: str) -> None:
    """Collect node and kube-system pod logs into LOCAL_PATH.

    Ctrl-C stops collection early; already collected logs are kept.
    """
    interrupt = ctx.obj.collaborators.interrupt

    def _on_sigint(signum: int, frame: FrameType | None) -> None:
        console.print("[yellow]Interrupted, stopping log collection...[/yellow]")
        interrupt.set()

    previous = signal.signal(signal.SIGINT, _on_sigint)
    try:
        _run(ctx, "dump_cluster_logs", lambda d: d.dump_cluster_logs(local_path, gcs_path))
    finally:
        signal.signal(signal.SIGINT, previous)


@cli.command()
@click.pass_context
def publish(ctx: click.Context) -> None:
    """Publish the tested kops version."""
    _run(ctx, "publish", lambda deployer: deployer.publish())


if __name__ == "__main__":
    cli()
