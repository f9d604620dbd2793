"""Kubernetes client for node and pod queries against an exported kubeconfig."""

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.client.models import V1Node, V1Pod
from urllib3.exceptions import HTTPError

from kopsdeployer.core.exceptions import KubernetesError
from kopsdeployer.utils.logging import get_logger

logger = get_logger(__name__)


class KubernetesClient:
    """Kubernetes client wrapper.

    The kubeconfig is read on every call rather than once at construction: the
    file is empty until `kops export kubecfg` has run.
    """

    def __init__(self, kubeconfig_path: str, context: str | None = None):
        """Initialize Kubernetes client.

        Args:
            kubeconfig_path: Path to kubeconfig file
            context: Kubernetes context to use (optional)
        """
        self.kubeconfig_path = kubeconfig_path
        self.context = context

    def _core_v1(self) -> client.CoreV1Api:
        try:
            api_client = config.new_client_from_config(
                config_file=self.kubeconfig_path, context=self.context
            )
        except (config.ConfigException, OSError) as e:
            logger.error("k8s_client_initialization_failed", error=str(e))
            raise KubernetesError(
                f"Failed to load kubeconfig {self.kubeconfig_path}: {e}"
            ) from e
        return client.CoreV1Api(api_client)

    def get_nodes(self) -> list[V1Node]:
        """Get all nodes in the cluster.

        Raises:
            KubernetesError: If nodes cannot be retrieved
        """
        try:
            nodes = self._core_v1().list_node().items
        except ApiException as e:
            logger.error("get_nodes_failed", status=e.status, reason=e.reason)
            raise KubernetesError(f"Failed to get nodes: {e.reason}") from e
        except HTTPError as e:
            logger.error("get_nodes_failed", error=str(e))
            raise KubernetesError(f"Failed to get nodes: {e}") from e

        logger.debug("nodes_retrieved", count=len(nodes))
        return nodes

    def count_ready_nodes(self) -> int:
        """Count nodes whose Ready condition is True."""
        ready = 0
        for node in self.get_nodes():
            for condition in node.status.conditions or []:
                if condition.type == "Ready":
                    if condition.status == "True":
                        ready += 1
                    break
        return ready

    def get_node_external_ips(self) -> dict[str, str]:
        """Map node name to its first ExternalIP address.

        Nodes without an external address are left out.
        """
        ips = {}
        for node in self.get_nodes():
            for address in node.status.addresses or []:
                if address.type == "ExternalIP":
                    ips[node.metadata.name] = address.address
                    break
        return ips

    def get_pods(self, namespace: str) -> list[V1Pod]:
        """Get pods in a namespace.

        Raises:
            KubernetesError: If pods cannot be retrieved
        """
        try:
            pods = self._core_v1().list_namespaced_pod(namespace=namespace).items
        except ApiException as e:
            logger.error("get_pods_failed", namespace=namespace, status=e.status, reason=e.reason)
            raise KubernetesError(f"Failed to get pods in {namespace}: {e.reason}") from e
        except HTTPError as e:
            logger.error("get_pods_failed", namespace=namespace, error=str(e))
            raise KubernetesError(f"Failed to get pods in {namespace}: {e}") from e

        logger.debug("pods_retrieved", namespace=namespace, count=len(pods))
        return pods

    def read_pod_log(self, namespace: str, pod: str, container: str) -> str:
        """Read the log of one container.

        Raises:
            KubernetesError: If the log cannot be read
        """
        try:
            return self._core_v1().read_namespaced_pod_log(
                name=pod, namespace=namespace, container=container
            )
        except ApiException as e:
            raise KubernetesError(
                f"Failed to read logs of {namespace}/{pod}/{container}: {e.reason}"
            ) from e
        except HTTPError as e:
            raise KubernetesError(
                f"Failed to read logs of {namespace}/{pod}/{container}: {e}"
            ) from e
