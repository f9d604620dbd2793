"""Configuration management for the kops deployer."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from kopsdeployer.core.exceptions import ConfigurationError
from kopsdeployer.core.models import Provider

# c5.large is the cheapest non-throttled EC2 instance type
DEFAULT_AWS_MASTER_SIZE = "c5.large"

DEFAULT_UP_TIMEOUT_SECONDS = 20 * 60


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "console"
    output: str = "stderr"


class KopsOptions(BaseModel):
    """Raw deployer settings, as given on the command line, in env or in a file.

    These are resolved into a DeployerConfig by the deployer factory.
    """

    provider: Provider = Provider.AWS
    gcp_project: str = ""
    cluster: str = ""

    kops_path: str = Field("", description="Path to the kops binary; downloaded when unset")
    kops_cluster: str = Field("", description="Deprecated. Overrides cluster when set")
    state: str = Field("", description="State store path, required for AWS")
    ssh_user: str = ""
    ssh_key: str = Field("", description="Private key path (default ~/.ssh/kube_aws_rsa)")
    ssh_public_key: str = Field("", description="Public key path (default <ssh_key>.pub)")
    kubernetes_version: str = ""
    zones: str = Field("", description="Comma separated zones")
    nodes: int = 2
    up_timeout: float = DEFAULT_UP_TIMEOUT_SECONDS
    admin_access: str = ""
    image: str = ""
    args: str = Field("", description="Space separated extra args for 'kops create cluster'")
    priority_path: str = ""
    base_url: str = ""
    version_url: str = Field("", description="URL of a file containing a valid base URL")
    disk_size: int = 48
    publish: str = ""
    master_size: str = DEFAULT_AWS_MASTER_SIZE
    master_count: int = 1
    dns_provider: str = ""
    etcd_version: str = ""
    network_mode: str = ""
    overrides: str = ""
    feature_flags: str = ""
    multiple_zones: bool = False
    run_dir: str = Field(
        "", description="Directory kept across invocations for the kubeconfig and state bucket"
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: str | Path, **overrides: Any) -> "KopsOptions":
        """Load options from a YAML file.

        Args:
            path: Path to the options file
            **overrides: Values that take precedence over the file

        Returns:
            KopsOptions instance

        Raises:
            ConfigurationError: If the file cannot be loaded or parsed
        """
        config_path = Path(path).expanduser()

        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with config_path.open() as f:
                data = yaml.safe_load(f) or {}
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")

        data.update(overrides)
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e


class DeployerConfig(BaseModel):
    """Resolved, immutable deployer configuration.

    Built once per run by the deployer factory and shared read-only by every
    component, including the background log dumping thread.
    """

    model_config = ConfigDict(frozen=True)

    kops_path: str
    cluster: str
    zones: list[str]
    provider: Provider
    kubeconfig: str
    kube_version: str = ""
    nodes: int = 2
    admin_access: str = ""
    image: str = ""
    args: str = ""
    disk_size: int = 48
    ssh_user: str = ""
    ssh_public_key: str = ""
    ssh_private_key: str = ""
    gcp_project: str = ""
    state_store: str = ""
    # base URL of the kops build under test, published on success
    kops_version: str = ""
    publish: str = ""
    master_count: int = 1
    dns_provider: str = ""
    etcd_version: str = ""
    master_size: str = DEFAULT_AWS_MASTER_SIZE
    network_mode: str = ""
    overrides: str = ""
    feature_flags: str = ""
    up_timeout: float = DEFAULT_UP_TIMEOUT_SECONDS

    @field_validator("cluster")
    @classmethod
    def _cluster_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("cluster name must be set")
        return value

    @field_validator("zones")
    @classmethod
    def _zones_not_empty(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("no zones found")
        if any(zone == "" for zone in value):
            raise ValueError("zone cannot be a empty string")
        return value

    @classmethod
    def build(cls, **values: Any) -> "DeployerConfig":
        """Construct a config, converting validation failures to ConfigurationError.

        Raises:
            ConfigurationError: If a value violates the config invariants
        """
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid deployer configuration: {e}") from e

    @property
    def is_google_cloud(self) -> bool:
        return self.provider == Provider.GCE

    @property
    def primary_zone(self) -> str:
        return self.zones[0]

    @property
    def region(self) -> str:
        """Region of the primary zone.

        GCE zones drop their last dash-separated part (us-central1-a ->
        us-central1), AWS zones their final letter (us-east-1a -> us-east-1).

        Raises:
            ConfigurationError: If the zone does not have the expected format
        """
        zone = self.primary_zone
        if self.is_google_cloud:
            last_dash = zone.rfind("-")
            if last_dash == -1:
                raise ConfigurationError(f"unexpected format for GCE zone: {zone!r}")
            return zone[:last_dash]
        return zone[:-1]
