"""Discovery of this machine's external IP for apiserver admin access."""

import ipaddress

from kopsdeployer.core.exceptions import ExternalIPError
from kopsdeployer.interfaces.exceptions import HTTPFetchError
from kopsdeployer.interfaces.http_fetcher import HTTPFetcher
from kopsdeployer.utils.logging import get_logger
from kopsdeployer.utils.retry import fixed_attempts

logger = get_logger(__name__)

EXTERNAL_IP_METADATA_URL = (
    "http://metadata.google.internal/computeMetadata/v1/instance/"
    "network-interfaces/0/access-configs/0/external-ip"
)

EXTERNAL_IP_SERVICE_URLS = [
    "https://ip.jsb.workers.dev",
    "https://v4.ifconfig.co",
]


def _parse_ip(body: str) -> str | None:
    try:
        return str(ipaddress.ip_address(body.strip()))
    except ValueError:
        return None


class _NoServiceAnswered(Exception):
    pass


class ExternalIPResolver:
    """Resolve the external IP range of the machine running the deployer.

    The GCE metadata server is asked first; when that fails (common under
    workload identity) a list of public IP echo services is tried in order,
    for a bounded number of rounds.
    """

    def __init__(
        self,
        http: HTTPFetcher,
        attempts: int = 5,
        wait_seconds: float = 2.0,
        service_urls: list[str] | None = None,
    ):
        """Initialize resolver.

        Args:
            http: HTTP fetcher used for metadata and echo services
            attempts: Rounds over the echo services before giving up
            wait_seconds: Pause between rounds (seconds)
            service_urls: Echo services to query (defaults to EXTERNAL_IP_SERVICE_URLS)
        """
        self.http = http
        self.attempts = attempts
        self.wait_seconds = wait_seconds
        self.service_urls = service_urls if service_urls is not None else EXTERNAL_IP_SERVICE_URLS

    def _from_metadata(self) -> str | None:
        try:
            body = self.http.get(EXTERNAL_IP_METADATA_URL, headers={"Metadata-Flavor": "Google"})
        except HTTPFetchError as e:
            logger.info("metadata_external_ip_unavailable", error=str(e))
            return None

        ip = _parse_ip(body)
        if ip is None:
            logger.info("metadata_returned_invalid_ip", body=body)
        return ip

    def _from_services(self) -> str:
        for url in self.service_urls:
            try:
                body = self.http.get(url)
            except HTTPFetchError as e:
                logger.info("external_ip_service_failed", url=url, error=str(e))
                continue

            ip = _parse_ip(body)
            if ip is not None:
                return ip
            logger.info("external_ip_service_returned_invalid_ip", url=url, body=body)

        raise _NoServiceAnswered()

    def resolve_admin_access_cidr(self) -> str:
        """Get the external IP range of this machine, e.g. 8.8.8.8/32.

        Returns:
            Single-address CIDR

        Raises:
            ExternalIPError: If every source failed on every attempt
        """
        ip = self._from_metadata()
        if ip is None:
            try:
                retrying = fixed_attempts((_NoServiceAnswered,), self.attempts, self.wait_seconds)
                for attempt in retrying:
                    with attempt:
                        ip = self._from_services()
            except _NoServiceAnswered as e:
                raise ExternalIPError("external IP cannot be retrieved") from e

        cidr = f"{ip}/32"
        logger.info("external_ip_resolved", cidr=cidr)
        return cidr
