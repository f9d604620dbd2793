"""Cluster status parsing and concurrent log collection."""

import json
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

from pydantic import ValidationError

from kopsdeployer.clients.kops import KopsWrapper
from kopsdeployer.clients.kubectl import KubectlWrapper
from kopsdeployer.core.exceptions import (
    DeployerError,
    KopsDeployerError,
    KopsError,
    KubectlError,
)
from kopsdeployer.core.models import KopsDump, KubeconfigSummary
from kopsdeployer.interfaces.exceptions import InterfaceError
from kopsdeployer.interfaces.log_dumper import LogDumper
from kopsdeployer.utils.logging import get_logger

logger = get_logger(__name__)

SYSTEM_NAMESPACE = "kube-system"


def parse_kops_dump(output: str) -> KopsDump:
    """Parse `kops toolbox dump -ojson` output.

    Raises:
        DeployerError: If the output is not a valid dump
    """
    try:
        return KopsDump.model_validate(json.loads(output))
    except (json.JSONDecodeError, ValidationError) as e:
        raise DeployerError(f"error parsing kops toolbox dump output: {e}") from e


def run_kops_dump(kops: KopsWrapper, cluster: str) -> KopsDump:
    """Dump the live instances of a cluster.

    Raises:
        KopsError: If kops fails (logged here, left to the caller to tolerate)
        DeployerError: If the dump cannot be parsed
    """
    try:
        output = kops.toolbox_dump(cluster)
    except KopsError as e:
        logger.error("kops_toolbox_dump_failed", cluster=cluster, error=str(e), output=e.output)
        raise
    return parse_kops_dump(output)


def parse_kubeconfig(kubectl: KubectlWrapper, kubeconfig_path: str) -> KubeconfigSummary:
    """Read the cluster servers of a kubeconfig through `kubectl config view`.

    Raises:
        KubectlError: If kubectl fails
        DeployerError: If kubectl output cannot be parsed
    """
    try:
        output = kubectl.config_view(kubeconfig_path)
    except KubectlError as e:
        logger.error("kubectl_config_view_failed", kubeconfig=kubeconfig_path, error=str(e))
        raise

    try:
        return KubeconfigSummary.model_validate(json.loads(output))
    except (json.JSONDecodeError, ValidationError) as e:
        raise DeployerError(f"error parsing kubectl config view output: {e}") from e


def collect_logs(
    dump_nodes: Callable[[threading.Event], None],
    log_dumper: LogDumper,
    interrupt: threading.Event,
    namespace: str = SYSTEM_NAMESPACE,
    poll_interval: float = 1.0,
) -> None:
    """Dump node logs in the background while dumping pod logs in the foreground.

    Both tasks share a cancellation event. An interrupt only sets that event;
    this function always waits for the node dump to finish and reports its
    outcome, whether it completed or stopped early.

    Args:
        dump_nodes: Node dump task, run on a worker thread
        log_dumper: Dumper used for pod logs on the calling thread
        interrupt: Set by the caller (e.g. on SIGINT) to request cancellation
        namespace: Namespace whose pod logs are dumped
        poll_interval: How often to check the interrupt while waiting (seconds)

    Raises:
        Exception: Whatever the node dump raised
    """
    cancel = threading.Event()

    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="node-log-dump") as executor:
        finished = executor.submit(dump_nodes, cancel)

        try:
            log_dumper.dump_pods(cancel, namespace)
        except (KopsDeployerError, InterfaceError, OSError) as e:
            # pod logs are best effort; the node dump outcome is what gets reported
            logger.warning("pod_log_dump_failed", namespace=namespace, error=str(e))

        while True:
            try:
                finished.result(timeout=poll_interval)
                return
            except FutureTimeoutError:
                if interrupt.is_set() and not cancel.is_set():
                    logger.warning("log_dump_interrupted")
                    cancel.set()
