"""Exceptions for capability implementations."""


class InterfaceError(Exception):
    """Base exception for all capability errors."""


class ComputeProviderError(InterfaceError):
    """Exception for compute API operations (regions, availability zones)."""


class ObjectStoreError(InterfaceError):
    """Exception for object storage operations."""


class ClusterHealthError(InterfaceError):
    """Exception for cluster API health and readiness checks."""


class LogDumpError(InterfaceError):
    """Exception for node and pod log collection.

    Attributes:
        failed_nodes: Addresses of nodes whose logs could not be collected
    """

    def __init__(self, message: str, failed_nodes: list[str] | None = None):
        super().__init__(message)
        self.failed_nodes = failed_nodes or []


class HTTPFetchError(InterfaceError):
    """Exception for HTTP fetches."""
