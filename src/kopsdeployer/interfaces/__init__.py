"""Capability interfaces consumed and exposed by the kops deployer."""

from kopsdeployer.interfaces.cluster_health import ClusterHealth
from kopsdeployer.interfaces.compute_provider import ComputeProvider
from kopsdeployer.interfaces.deployer import Deployer, Publisher, TestBuilder
from kopsdeployer.interfaces.http_fetcher import HTTPFetcher
from kopsdeployer.interfaces.log_dumper import LogDumper
from kopsdeployer.interfaces.object_store import ObjectStore

__all__ = [
    "ClusterHealth",
    "ComputeProvider",
    "Deployer",
    "HTTPFetcher",
    "LogDumper",
    "ObjectStore",
    "Publisher",
    "TestBuilder",
]
