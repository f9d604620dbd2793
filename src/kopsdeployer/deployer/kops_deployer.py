"""kops deployer: cluster lifecycle on behalf of the e2e harness."""

import os
import threading
from collections.abc import Callable, Mapping
from datetime import datetime

from kopsdeployer.adapters.ssh_log_dumper import SSHLogDumper
from kopsdeployer.clients.kops import KopsWrapper
from kopsdeployer.clients.kubectl import KubectlWrapper
from kopsdeployer.clients.kubernetes_client import KubernetesClient
from kopsdeployer.clients.ssh_client import (
    SSHClientConfig,
    SSHClientFactory,
    expand_home,
    parse_private_key,
)
from kopsdeployer.core.config import DeployerConfig
from kopsdeployer.core.exceptions import (
    ConfigurationError,
    DeployerError,
    ExternalIPError,
    KopsError,
    KubectlError,
    SSHError,
)
from kopsdeployer.core.models import BuildTesterOptions, ClusterState, GinkgoTester, Provider
from kopsdeployer.deployer.command_builder import build_create_cluster_command, resolve_kube_version
from kopsdeployer.deployer.external_ip import ExternalIPResolver
from kopsdeployer.deployer.log_collector import collect_logs, parse_kubeconfig, run_kops_dump
from kopsdeployer.deployer.run_record import RunRecord
from kopsdeployer.interfaces.cluster_health import ClusterHealth
from kopsdeployer.interfaces.deployer import Deployer, Publisher, TestBuilder
from kopsdeployer.interfaces.exceptions import ClusterHealthError
from kopsdeployer.interfaces.log_dumper import LogDumper
from kopsdeployer.interfaces.object_store import ObjectStore
from kopsdeployer.utils.logging import get_logger

logger = get_logger(__name__)

VALIDATE_WAIT = "15m"

# Readiness must hold for this many polls in a row; DNS can take a while to
# converge across servers and caches in HA setups.
REQUIRED_CONSECUTIVE_SUCCESSES = 10

LogDumperFactory = Callable[[SSHClientConfig, str], LogDumper]


def cluster_environment(config: DeployerConfig) -> dict[str, str]:
    """Variables the kops processes and downstream e2e suites expect."""
    env = {
        "KOPS_STATE_STORE": config.state_store,
        "KUBECONFIG": config.kubeconfig,
        # pick auth info up from kubectl rather than bash inference
        "KUBERNETES_CONFORMANCE_TEST": "yes",
        # the e2e scripts only handle aws here, even for gce clusters
        "KUBERNETES_CONFORMANCE_PROVIDER": "aws",
        "AWS_SSH_KEY": config.ssh_private_key,
        "ZONE": config.primary_zone,
    }
    if config.ssh_user:
        env["KUBE_SSH_USER"] = config.ssh_user
    if config.kops_version:
        env["KOPS_BASE_URL"] = config.kops_version
    return env


class KopsDeployer(Deployer, Publisher, TestBuilder):
    """Drive kops to manage the lifecycle of one test cluster.

    All settings come from an immutable DeployerConfig. The admin access CIDR
    is the only value computed later: it is resolved on the first `up` when it
    was not configured.
    """

    def __init__(
        self,
        config: DeployerConfig,
        kops: KopsWrapper,
        kubectl: KubectlWrapper,
        cluster_health: ClusterHealth,
        ip_resolver: ExternalIPResolver,
        object_store: ObjectStore | None = None,
        state_bucket: str = "",
        run_dir: str = "",
        env: Mapping[str, str] | None = None,
        interrupt: threading.Event | None = None,
        log_dumper_factory: LogDumperFactory | None = None,
    ):
        """Initialize deployer.

        Args:
            config: Resolved deployer configuration
            kops: kops wrapper, already carrying the environment() variables
            kubectl: kubectl wrapper used to read the exported kubeconfig
            cluster_health: Node readiness and API reachability checks
            ip_resolver: Resolver for the admin access CIDR
            object_store: Object store for state buckets and publishing (optional)
            state_bucket: State-store bucket allocated for this run, deleted by `down`
            run_dir: Run directory whose record `down` clears once the bucket is gone
            env: Harness environment (KUBERNETES_RELEASE_URL, HOME, ...)
            interrupt: Set by the harness to cancel log dumping
            log_dumper_factory: Builds the log dumper for `dump_cluster_logs`
        """
        self.config = config
        self.kops = kops
        self.kubectl = kubectl
        self.cluster_health = cluster_health
        self.ip_resolver = ip_resolver
        self.object_store = object_store
        self.state_bucket = state_bucket
        self.run_dir = run_dir
        self.env = dict(env or {})
        self.interrupt = interrupt or threading.Event()
        self.log_dumper_factory = log_dumper_factory or self._default_log_dumper

        self.admin_access = config.admin_access
        self.state = ClusterState.UNKNOWN

    def _transition(self, state: ClusterState) -> None:
        logger.info(
            "cluster_state_changed",
            cluster=self.config.cluster,
            previous=self.state.value,
            state=state.value,
        )
        self.state = state

    def environment(self) -> dict[str, str]:
        """Variables downstream e2e suites expect for this cluster."""
        return cluster_environment(self.config)

    def up(self) -> None:
        config = self.config
        kube_version = resolve_kube_version(
            config.kube_version,
            self.env.get("KUBERNETES_RELEASE_URL", ""),
            self.env.get("KUBERNETES_RELEASE", ""),
        )

        if not self.admin_access:
            try:
                self.admin_access = self.ip_resolver.resolve_admin_access_cidr()
            except ExternalIPError as e:
                raise DeployerError(f"external IP cannot be retrieved: {e}") from e
            logger.info("using_external_ip_for_admin_access", admin_access=self.admin_access)

        command = build_create_cluster_command(config, kube_version, self.admin_access)

        self._transition(ClusterState.CREATING)
        try:
            self.kops.create_cluster(command.args, extra_env=command.env)
        except KopsError as e:
            raise DeployerError(f"kops create cluster failed: {e}") from e

        self._transition(ClusterState.VALIDATING)
        try:
            self.kops.validate_cluster(config.cluster, wait=VALIDATE_WAIT)
        except KopsError as e:
            raise DeployerError(f"kops validate cluster failed: {e}") from e

        # workers plus one control plane entity
        try:
            self.cluster_health.wait_for_ready_nodes(
                config.nodes + 1, config.up_timeout, REQUIRED_CONSECUTIVE_SUCCESSES
            )
        except ClusterHealthError as e:
            raise DeployerError(f"kops nodes not ready: {e}") from e

        self._transition(ClusterState.READY)

    def is_up(self) -> None:
        self.cluster_health.is_up()

    def test_setup(self) -> None:
        kubeconfig = self.config.kubeconfig
        try:
            if os.path.getsize(kubeconfig) > 0:
                # assume an existing kubeconfig is good
                return
        except FileNotFoundError:
            logger.info("kubeconfig_not_found", kubeconfig=kubeconfig)

        try:
            self.kops.export_kubecfg(self.config.cluster)
        except KopsError as e:
            raise DeployerError(
                f"failure from 'kops export kubecfg {self.config.cluster}': {e}"
            ) from e

        # kops can exit zero without writing anything
        try:
            size = os.path.getsize(kubeconfig)
        except FileNotFoundError as e:
            raise DeployerError(f"kubeconfig file {kubeconfig} was not exported") from e
        if size == 0:
            raise DeployerError(f"exported kubeconfig file {kubeconfig} was empty")

    def down(self) -> None:
        cluster = self.config.cluster

        # `kops delete` exits 1 on a missing cluster, so check existence first
        try:
            self.kops.get_cluster(cluster)
        except KopsError:
            logger.info("cluster_not_found_skipping_delete", cluster=cluster)
            self._transition(ClusterState.NOT_CREATED)
            return

        self._transition(ClusterState.DELETING)
        try:
            self.kops.delete_cluster(cluster)
        except KopsError as e:
            # best effort: kops exit codes are unreliable on partial teardown
            logger.warning("kops_delete_cluster_failed_ignored", cluster=cluster, error=str(e))

        if self.config.is_google_cloud and self.state_bucket:
            if self.object_store is None:
                raise ConfigurationError("state bucket allocated but no object store configured")
            self.object_store.delete_bucket(self.state_bucket)
            if self.run_dir:
                RunRecord.remove(self.run_dir)

        self._transition(ClusterState.DELETED)

    def get_cluster_created(self, project: str) -> datetime:
        raise NotImplementedError("not implemented")

    def publish(self) -> None:
        """Publish the kops version under test, after the tests passed.

        Does nothing when no publish destination is configured.

        Raises:
            DeployerError: If there is no kops version to publish
            ObjectStoreError: If the write fails
        """
        config = self.config
        if not config.publish:
            return

        if not config.kops_version:
            raise DeployerError("kops-version not set; cannot publish")
        if self.object_store is None:
            raise ConfigurationError("publishing requires an object store")

        logger.info(
            "publishing_kops_version", destination=config.publish, version=config.kops_version
        )
        self.object_store.write_object(config.publish, config.kops_version.encode())

    def build_tester(self, options: BuildTesterOptions) -> GinkgoTester:
        config = self.config
        try:
            kubeconfig = parse_kubeconfig(self.kubectl, config.kubeconfig)
        except (KubectlError, DeployerError) as e:
            raise DeployerError(f"error parsing kubeconfig {config.kubeconfig!r}: {e}") from e

        logger.info("running_ginkgo_tests_directly")

        tester = GinkgoTester(
            options=options,
            kubeconfig=config.kubeconfig,
            provider=config.provider.value,
            cluster_id=config.cluster,
            kube_master_url=kubeconfig.first_server() or "",
        )

        if config.provider == Provider.GCE:
            tester.gce_project = config.gcp_project
        tester.gce_zone = config.primary_zone
        tester.gce_region = config.region

        return tester

    def _default_log_dumper(self, ssh_config: SSHClientConfig, local_path: str) -> LogDumper:
        return SSHLogDumper(
            SSHClientFactory(ssh_config),
            KubernetesClient(kubeconfig_path=self.config.kubeconfig),
            local_path,
            dump_sysctls=True,
        )

    def _load_ssh_config(self) -> SSHClientConfig:
        configured = self.config.ssh_private_key
        path = expand_home(configured, self.env.get("HOME", os.path.expanduser("~")))
        try:
            with open(path) as f:
                data = f.read()
        except OSError as e:
            raise DeployerError(f"error reading private key {configured!r}: {e}") from e

        try:
            key = parse_private_key(data)
        except SSHError as e:
            raise DeployerError(f"error parsing private key {configured!r}: {e}") from e

        return SSHClientConfig(user=self.config.ssh_user, key=key)

    def _dump_all_nodes(self, log_dumper: LogDumper, cancel: threading.Event) -> None:
        # node discovery reads the kubeconfig, so it has to exist first
        try:
            self.test_setup()
        except DeployerError as e:
            raise DeployerError(f"error setting up kubeconfig: {e}") from e

        additional_ips: list[str] = []
        try:
            dump = run_kops_dump(self.kops, self.config.cluster)
        except (KopsError, DeployerError) as e:
            logger.warning("unable_to_get_cluster_status_from_kops", error=str(e))
        else:
            additional_ips = dump.public_ips()

        log_dumper.dump_all_nodes(cancel, additional_ips)

    def dump_cluster_logs(self, local_path: str, gcs_path: str) -> None:
        # a Ctrl-C from an earlier dump must not cancel this one
        self.interrupt.clear()
        ssh_config = self._load_ssh_config()
        log_dumper = self.log_dumper_factory(ssh_config, local_path)

        logger.info("dumping_cluster_logs", local_path=local_path, gcs_path=gcs_path)
        collect_logs(
            lambda cancel: self._dump_all_nodes(log_dumper, cancel),
            log_dumper,
            self.interrupt,
        )
