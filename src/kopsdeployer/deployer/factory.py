"""Construction of a KopsDeployer from raw options."""

import os
import secrets
import stat
import tempfile
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from kopsdeployer.adapters.aws_adapter import AWSAdapter
from kopsdeployer.adapters.gcs_adapter import GCSAdapter
from kopsdeployer.adapters.k8s_adapter import KubernetesAdapter
from kopsdeployer.clients.http_client import HTTPClient
from kopsdeployer.clients.kops import KopsWrapper
from kopsdeployer.clients.kubectl import KubectlWrapper
from kopsdeployer.core.config import DeployerConfig, KopsOptions
from kopsdeployer.core.exceptions import ConfigurationError
from kopsdeployer.core.models import Provider
from kopsdeployer.deployer.external_ip import ExternalIPResolver
from kopsdeployer.deployer.kops_deployer import KopsDeployer, cluster_environment
from kopsdeployer.deployer.run_record import RunRecord
from kopsdeployer.deployer.zones import select_zones
from kopsdeployer.interfaces.cluster_health import ClusterHealth
from kopsdeployer.interfaces.compute_provider import ComputeProvider
from kopsdeployer.interfaces.http_fetcher import HTTPFetcher
from kopsdeployer.interfaces.object_store import ObjectStore
from kopsdeployer.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SSH_KEY = "~/.ssh/kube_aws_rsa"
KOPS_BINARY_SUFFIX = "/linux/amd64/kops"


@dataclass
class Collaborators:
    """External capabilities a deployer run needs.

    Any left as None is built from its default implementation.
    """

    http: HTTPFetcher | None = None
    compute: ComputeProvider | None = None
    object_store: ObjectStore | None = None
    cluster_health: ClusterHealth | None = None
    interrupt: threading.Event = field(default_factory=threading.Event)


def gce_bucket_name(project: str) -> str:
    """Name for a one-off GCE state-store bucket: <project>-state-<4 hex chars>."""
    return f"{project}-state-{secrets.token_hex(2)}"


def setup_gce_state_store(object_store: ObjectStore, project: str) -> tuple[str, str]:
    """Create a fresh state-store bucket in the project.

    Returns:
        Tuple of (bucket name, gs:// state store URL)
    """
    name = gce_bucket_name(project)
    object_store.create_bucket(name, project)
    logger.info("created_gcs_state_store_bucket", bucket=name)
    return name, f"gs://{name}"


def resolve_base_url(options: KopsOptions, http: HTTPFetcher) -> str:
    """Resolve the kops base URL, following version_url when given.

    Raises:
        ConfigurationError: If both are set or the version file is empty
    """
    if not options.version_url:
        return options.base_url

    if options.base_url:
        raise ConfigurationError("cannot set --kops-version and --kops-base-url")

    latest = http.get(options.version_url).strip()
    logger.info("got_latest_kops_version", version_url=options.version_url, base_url=latest)
    if not latest:
        raise ConfigurationError(f"version URL {options.version_url} was empty")
    return latest


def download_kops(base_url: str, workdir: str, http: HTTPFetcher) -> str:
    """Download the linux/amd64 kops binary for base_url into workdir.

    Returns:
        Path of the executable
    """
    url = base_url + KOPS_BINARY_SUFFIX
    path = os.path.join(workdir, "kops")
    logger.info("downloading_kops_binary", url=url)
    http.download(url, path)
    mode = os.stat(path).st_mode
    os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def prepare_workdir(run_dir: str) -> str:
    """Directory for the kubeconfig and downloaded kops of this run.

    A run directory is kept across invocations; without one a fresh temp dir
    is used.
    """
    if not run_dir:
        return tempfile.mkdtemp(prefix="kops")
    path = Path(run_dir).expanduser()
    path.mkdir(mode=0o700, parents=True, exist_ok=True)
    return str(path)


def resolve_gce_state_store(
    object_store: ObjectStore, options: KopsOptions, run_dir: str
) -> tuple[str, str]:
    """State store for a GCE run.

    An explicit state store is used as is and never deleted. Otherwise the
    bucket recorded in the run directory is reused, or a fresh one is created
    and recorded there.

    Returns:
        Tuple of (bucket `down` deletes, or "", gs:// state store URL)
    """
    if options.state:
        return "", options.state

    if run_dir:
        record = RunRecord.load(run_dir)
        if record.state_bucket:
            logger.info("reusing_gcs_state_store_bucket", bucket=record.state_bucket)
            return record.state_bucket, record.state_store

    name, state_store = setup_gce_state_store(object_store, options.gcp_project)
    if run_dir:
        RunRecord(state_bucket=name, state_store=state_store).save(run_dir)
    return name, state_store


def create_isolated_kubeconfig(workdir: str) -> str:
    """Create the owner-only kubeconfig file, keeping one the run already has."""
    path = Path(workdir) / "kubeconfig"
    path.touch(mode=0o600)
    path.chmod(0o600)
    return str(path)


def resolve_zones(options: KopsOptions, compute: ComputeProvider | None) -> list[str]:
    """Zones for the cluster: configured ones, or random AWS zones when none are.

    Raises:
        ConfigurationError: If the resulting zone list is unusable
    """
    if not options.zones and options.provider == Provider.AWS:
        return select_zones(
            compute or AWSAdapter(), options.master_count, options.multiple_zones
        )
    zones = options.zones.split(",")
    if any(zone == "" for zone in zones):
        raise ConfigurationError("zone cannot be a empty string")
    return zones


def create_deployer(
    options: KopsOptions,
    env: Mapping[str, str] | None = None,
    collaborators: Collaborators | None = None,
) -> KopsDeployer:
    """Prepare a run and build its deployer.

    Picks zones, then creates the work dir (the run directory when one is
    given, a temp dir otherwise), the isolated kubeconfig and the GCE state
    store, and downloads kops when no binary was given. Settings are validated
    before anything is created.

    Args:
        options: Raw deployer options
        env: Harness environment; defaults to os.environ
        collaborators: Capability overrides (tests, alternative clouds)

    Returns:
        Ready-to-use KopsDeployer

    Raises:
        ConfigurationError: If the options are invalid
    """
    env = dict(os.environ if env is None else env)
    collaborators = collaborators or Collaborators()
    http = collaborators.http or HTTPClient()

    cluster = options.kops_cluster or options.cluster
    if not cluster:
        raise ConfigurationError(
            "--cluster or --kops-cluster must be set to a valid cluster name for kops deployment"
        )
    if not options.state and options.provider != Provider.GCE:
        raise ConfigurationError(
            "--kops-state must be set to a valid S3 path for kops deployments on AWS"
        )
    if options.version_url and options.base_url:
        raise ConfigurationError("cannot set --kops-version and --kops-base-url")
    if not options.kops_path and not options.base_url and not options.version_url:
        raise ConfigurationError("--kops or --kops-base-url must be set")

    zones = resolve_zones(options, collaborators.compute)
    logger.info("executing_kops_with_zones", zones=zones)

    base_url = resolve_base_url(options, http)

    # options are fully validated; files and buckets are only created from here on
    workdir = prepare_workdir(options.run_dir)
    run_dir = workdir if options.run_dir else ""
    kubeconfig = create_isolated_kubeconfig(workdir)
    kops_path = options.kops_path or download_kops(base_url, workdir, http)

    ssh_key = options.ssh_key or DEFAULT_SSH_KEY
    ssh_public_key = options.ssh_public_key or f"{ssh_key}.pub"

    object_store = collaborators.object_store
    state_store = options.state
    state_bucket = ""
    if options.provider == Provider.GCE:
        object_store = object_store or GCSAdapter()
        state_bucket, state_store = resolve_gce_state_store(object_store, options, run_dir)

    config = DeployerConfig.build(
        kops_path=kops_path,
        cluster=cluster,
        zones=zones,
        provider=options.provider,
        kubeconfig=kubeconfig,
        kube_version=options.kubernetes_version,
        nodes=options.nodes,
        admin_access=options.admin_access,
        image=options.image,
        args=options.args,
        disk_size=options.disk_size,
        ssh_user=options.ssh_user,
        ssh_public_key=ssh_public_key,
        ssh_private_key=ssh_key,
        gcp_project=options.gcp_project,
        state_store=state_store,
        kops_version=base_url,
        publish=options.publish,
        master_count=options.master_count,
        dns_provider=options.dns_provider,
        etcd_version=options.etcd_version,
        master_size=options.master_size,
        network_mode=options.network_mode,
        overrides=options.overrides,
        feature_flags=options.feature_flags,
        up_timeout=options.up_timeout,
    )

    kops = KopsWrapper(
        kops_path=config.kops_path,
        env=cluster_environment(config),
        priority_path=options.priority_path,
    )

    if object_store is None and config.publish:
        object_store = GCSAdapter()

    return KopsDeployer(
        config=config,
        kops=kops,
        kubectl=KubectlWrapper(),
        cluster_health=collaborators.cluster_health or KubernetesAdapter(config.kubeconfig),
        ip_resolver=ExternalIPResolver(http),
        object_store=object_store,
        state_bucket=state_bucket,
        run_dir=run_dir,
        env=env,
        interrupt=collaborators.interrupt,
    )
