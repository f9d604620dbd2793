"""Core data models for the kops deployer."""

import json
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from kopsdeployer.utils.logging import get_logger

logger = get_logger(__name__)


class Provider(str, Enum):
    """Cloud providers kops can deploy to."""

    GCE = "gce"
    AWS = "aws"


class ClusterState(str, Enum):
    """Lifecycle state of the cluster managed by a deployer."""

    NOT_CREATED = "not-created"
    CREATING = "creating"
    VALIDATING = "validating"
    READY = "ready"
    DELETING = "deleting"
    DELETED = "deleted"
    UNKNOWN = "unknown"


class KopsDumpInstance(BaseModel):
    """An instance (machine) in a kops dump."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    public_addresses: list[str] = Field(default_factory=list, alias="publicAddresses")

    @field_validator("public_addresses", mode="before")
    @classmethod
    def _null_as_empty(cls, value: list[str] | None) -> list[str]:
        # kops writes instances without addresses as "publicAddresses": null
        return value or []

    def __str__(self) -> str:
        return json.dumps(self.model_dump(by_alias=True), indent=2)


class KopsDump(BaseModel):
    """Output of `kops toolbox dump -ojson`.

    Only the fields needed to locate nodes are modelled; everything else in
    the dump is ignored.
    """

    instances: list[KopsDumpInstance] = Field(default_factory=list)

    def public_ips(self) -> list[str]:
        """Get the first public address of every instance.

        Instances without a public address are skipped.

        Returns:
            List of IP addresses in dump order
        """
        ips = []
        for instance in self.instances:
            if not instance.public_addresses:
                logger.info("ignoring_instance_without_public_address", instance=instance.name)
                continue
            ips.append(instance.public_addresses[0])
        return ips

    def __str__(self) -> str:
        return json.dumps(self.model_dump(by_alias=True), indent=2)


class KubeconfigCluster(BaseModel):
    """Connection details of a kubeconfig cluster entry."""

    server: str = ""


class KubeconfigClusterEntry(BaseModel):
    """Named cluster entry of a kubeconfig."""

    cluster: KubeconfigCluster = Field(default_factory=KubeconfigCluster)


class KubeconfigSummary(BaseModel):
    """Simplified view of a kubeconfig: only the cluster server URLs."""

    clusters: list[KubeconfigClusterEntry] = Field(default_factory=list)

    def first_server(self) -> str | None:
        """Get the API server URL of the first cluster, if any."""
        if not self.clusters:
            return None
        return self.clusters[0].cluster.server


class BuildTesterOptions(BaseModel):
    """Harness options for building a conformance tester."""

    focus_regex: str = ""
    skip_regex: str = ""
    parallelism: int = 1
    flake_attempts: int = 1
    test_args: list[str] = Field(default_factory=list)


class GinkgoTester(BaseModel):
    """Configuration of a ginkgo-based e2e tester run against a kops cluster.

    The gce_* fields are provider agnostic despite their names: AWS clusters
    fill in zone and region as well.
    """

    options: BuildTesterOptions = Field(default_factory=BuildTesterOptions)
    kube_root: str = "."
    kubeconfig: str = ""
    provider: str = ""
    cluster_id: str = ""
    kube_master_url: str = ""
    gce_project: str = ""
    gce_zone: str = ""
    gce_region: str = ""
