"""SSH-based log dumper implementing LogDumper interface."""

import threading
from pathlib import Path

import paramiko

from kopsdeployer.clients.kubernetes_client import KubernetesClient
from kopsdeployer.clients.ssh_client import SSHClientFactory
from kopsdeployer.core.exceptions import KubernetesError, SSHError
from kopsdeployer.interfaces.exceptions import LogDumpError
from kopsdeployer.interfaces.log_dumper import LogDumper
from kopsdeployer.utils.logging import get_logger

logger = get_logger(__name__)

SYSTEMD_SERVICES = [
    "kubelet",
    "docker",
    "containerd",
    "kops-configuration",
    "protokube",
]

LOG_FILES = [
    "kube-apiserver.log",
    "kube-controller-manager.log",
    "kube-scheduler.log",
    "kube-proxy.log",
    "etcd.log",
    "etcd-events.log",
    "cloud-init-output.log",
]


class SSHLogDumper(LogDumper):
    """Collect node logs over SSH and pod logs through the Kubernetes API.

    Node logs land in <local_path>/<node>/, pod logs in
    <local_path>/pods/<namespace>/<pod>-<container>.log.
    """

    def __init__(
        self,
        ssh_factory: SSHClientFactory,
        kubernetes_client: KubernetesClient,
        local_path: str,
        dump_sysctls: bool = False,
    ):
        """Initialize log dumper.

        Args:
            ssh_factory: Factory for authenticated SSH sessions
            kubernetes_client: Client used to discover nodes and read pod logs
            local_path: Root directory for collected logs
            dump_sysctls: Also capture `sysctl -a` from every node
        """
        self.ssh_factory = ssh_factory
        self.kubernetes_client = kubernetes_client
        self.local_path = Path(local_path)
        self.dump_sysctls = dump_sysctls

        self.local_path.mkdir(parents=True, exist_ok=True)

    def _node_commands(self) -> dict[str, str]:
        commands = {"kern.log": "sudo journalctl --output=short-precise -k"}
        for service in SYSTEMD_SERVICES:
            commands[f"{service}.log"] = f"sudo journalctl --output=cat -u {service}.service"
        for name in LOG_FILES:
            commands[name] = f"sudo cat /var/log/{name}"
        if self.dump_sysctls:
            commands["sysctl.conf"] = "sudo sysctl -a"
        return commands

    def _discover_nodes(self, additional_ips: list[str]) -> dict[str, str]:
        """Map a directory name to an address for every node we can reach."""
        nodes: dict[str, str] = {}
        try:
            nodes.update(self.kubernetes_client.get_node_external_ips())
        except KubernetesError as e:
            logger.warning("node_discovery_from_api_failed", error=str(e))

        known = set(nodes.values())
        for ip in additional_ips:
            if ip not in known:
                nodes[ip] = ip
                known.add(ip)
        return nodes

    def _dump_node(self, cancel: threading.Event, name: str, address: str) -> None:
        node_dir = self.local_path / name
        node_dir.mkdir(parents=True, exist_ok=True)

        ssh: paramiko.SSHClient = self.ssh_factory.connect(address)
        try:
            for filename, command in self._node_commands().items():
                if cancel.is_set():
                    return
                status, output = self.ssh_factory.run(ssh, command)
                if status != 0:
                    # most log files only exist on control plane nodes
                    logger.debug("node_log_unavailable", node=name, file=filename, status=status)
                    continue
                (node_dir / filename).write_bytes(output)
        finally:
            ssh.close()

    def dump_all_nodes(self, cancel: threading.Event, additional_ips: list[str]) -> None:
        nodes = self._discover_nodes(additional_ips)
        logger.info("dumping_node_logs", nodes=len(nodes), local_path=str(self.local_path))

        failed = []
        for name, address in nodes.items():
            if cancel.is_set():
                logger.info("node_log_dump_cancelled")
                break
            try:
                self._dump_node(cancel, name, address)
            except (SSHError, OSError) as e:
                logger.warning("node_log_dump_failed", node=name, address=address, error=str(e))
                failed.append(address)

        if failed:
            raise LogDumpError(
                f"failed to dump logs from {len(failed)} node(s): {', '.join(failed)}",
                failed_nodes=failed,
            )

    def dump_pods(self, cancel: threading.Event, namespace: str) -> None:
        pod_dir = self.local_path / "pods" / namespace
        pod_dir.mkdir(parents=True, exist_ok=True)

        try:
            pods = self.kubernetes_client.get_pods(namespace)
        except KubernetesError as e:
            logger.warning("pod_listing_failed", namespace=namespace, error=str(e))
            return

        for pod in pods:
            for container in pod.spec.containers:
                if cancel.is_set():
                    logger.info("pod_log_dump_cancelled", namespace=namespace)
                    return
                pod_name = pod.metadata.name
                try:
                    log = self.kubernetes_client.read_pod_log(namespace, pod_name, container.name)
                except KubernetesError as e:
                    logger.warning("pod_log_dump_failed", pod=pod_name, error=str(e))
                    continue
                (pod_dir / f"{pod_name}-{container.name}.log").write_text(log or "")
