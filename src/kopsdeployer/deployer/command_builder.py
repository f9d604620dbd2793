"""Assembly of the `kops create cluster` command line."""

from dataclasses import dataclass, field

from kopsdeployer.core.config import DEFAULT_AWS_MASTER_SIZE, DeployerConfig

# conformance tests need node ports reachable from every node
NODE_PORT_ACCESS_OVERRIDE = "cluster.spec.nodePortAccess=0.0.0.0/0"

GCE_FEATURE_FLAG = "AlphaAllowGCE"
SPEC_OVERRIDE_FEATURE_FLAG = "SpecOverrideFlag"
FEATURE_FLAGS_ENV = "KOPS_FEATURE_FLAGS"


@dataclass
class CreateClusterCommand:
    """Arguments and extra environment for one `kops create cluster` run."""

    args: list[str]
    env: dict[str, str] = field(default_factory=dict)

    @property
    def overrides(self) -> list[str]:
        """Values passed to --override, in order."""
        if "--override" not in self.args:
            return []
        return self.args[self.args.index("--override") + 1].split(",")

    @property
    def feature_flags(self) -> list[str]:
        """Feature flags exported to kops through the environment."""
        value = self.env.get(FEATURE_FLAGS_ENV, "")
        return value.split(",") if value else []


def resolve_kube_version(configured: str, release_url: str, release: str) -> str:
    """Pick the Kubernetes version to pass to kops.

    An explicitly configured version wins. Otherwise, when the harness
    downloaded a release, point kops at <release_url>/<release>.
    """
    if configured:
        return configured
    if release_url and release:
        if not release_url.endswith("/"):
            release_url += "/"
        return release_url + release
    return ""


def build_create_cluster_command(
    config: DeployerConfig, kube_version: str, admin_access: str
) -> CreateClusterCommand:
    """Build the `kops create cluster` invocation for a config.

    Args:
        config: Resolved deployer configuration
        kube_version: Kubernetes version, or "" to use the kops default
        admin_access: CIDR allowed to reach the apiserver

    Returns:
        CreateClusterCommand with ordered args and KOPS_FEATURE_FLAGS env
    """
    args = [
        "create", "cluster",
        "--name", config.cluster,
        "--ssh-public-key", config.ssh_public_key,
        "--node-count", str(config.nodes),
        "--node-volume-size", str(config.disk_size),
        "--master-volume-size", str(config.disk_size),
        "--master-count", str(config.master_count),
        "--zones", ",".join(config.zones),
    ]  # fmt: skip

    feature_flags = [config.feature_flags] if config.feature_flags else []
    overrides = [config.overrides] if config.overrides else []

    # The default master size is an EC2 instance type, meaningless on GCE
    if not config.is_google_cloud or config.master_size != DEFAULT_AWS_MASTER_SIZE:
        args += ["--master-size", config.master_size]

    if kube_version:
        args += ["--kubernetes-version", kube_version]

    args += ["--admin-access", admin_access]

    overrides.append(NODE_PORT_ACCESS_OVERRIDE)

    if config.image:
        args += ["--image", config.image]
    if config.gcp_project:
        args += ["--project", config.gcp_project]

    if config.is_google_cloud:
        feature_flags.append(GCE_FEATURE_FLAG)
        args += ["--cloud", "gce"]
    else:
        # explicit cloud lets kops accept regions it does not know yet
        args += ["--cloud", "aws"]

    if config.network_mode:
        args += ["--networking", config.network_mode]

    # split on single spaces: extra args cannot themselves contain spaces
    if config.args:
        args += config.args.split(" ")

    if config.dns_provider:
        overrides.append(f"spec.kubeDNS.provider={config.dns_provider}")
    if config.etcd_version:
        overrides.append(f"cluster.spec.etcdClusters[*].version={config.etcd_version}")

    if overrides:
        feature_flags.append(SPEC_OVERRIDE_FEATURE_FLAG)
        args += ["--override", ",".join(overrides)]

    env = {}
    if feature_flags:
        env[FEATURE_FLAGS_ENV] = ",".join(feature_flags)

    args.append("--yes")

    return CreateClusterCommand(args=args, env=env)
