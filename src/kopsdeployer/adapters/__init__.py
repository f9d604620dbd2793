"""Adapter implementations for external services."""

from kopsdeployer.adapters.aws_adapter import AWSAdapter
from kopsdeployer.adapters.gcs_adapter import GCSAdapter
from kopsdeployer.adapters.k8s_adapter import KubernetesAdapter
from kopsdeployer.adapters.ssh_log_dumper import SSHLogDumper

__all__ = [
    "AWSAdapter",
    "GCSAdapter",
    "KubernetesAdapter",
    "SSHLogDumper",
]
