"""Log dumper interface for node and pod log collection."""

import threading
from abc import ABC, abstractmethod


class LogDumper(ABC):
    """Abstract interface for collecting cluster logs to a local directory.

    Both methods receive a cancellation event; implementations check it between
    units of work and return early once it is set.
    """

    @abstractmethod
    def dump_all_nodes(self, cancel: threading.Event, additional_ips: list[str]) -> None:
        """Dump logs from every known node.

        Args:
            cancel: Set when the caller wants the dump to stop
            additional_ips: Node addresses discovered outside the Kubernetes API

        Raises:
            LogDumpError: If logs could not be collected from some node
        """

    @abstractmethod
    def dump_pods(self, cancel: threading.Event, namespace: str) -> None:
        """Dump logs of every pod in a namespace."""
