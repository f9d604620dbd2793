"""AWS adapter implementing ComputeProvider interface."""

from botocore.exceptions import BotoCoreError, ClientError

from kopsdeployer.clients.aws_client import AWSClient
from kopsdeployer.interfaces.compute_provider import ComputeProvider
from kopsdeployer.interfaces.exceptions import ComputeProviderError
from kopsdeployer.utils.logging import get_logger

logger = get_logger(__name__)


class AWSAdapter(ComputeProvider):
    """Adapter wrapping per-region AWSClients to implement ComputeProvider.

    The EC2 API only describes the zones of the region a client is bound to,
    so a client is created for every region queried.
    """

    def __init__(self, profile: str | None = None):
        """Initialize AWS adapter.

        Args:
            profile: AWS profile name (optional)
        """
        self.profile = profile

    def _client_for(self, region: str) -> AWSClient:
        return AWSClient(region=region, profile=self.profile)

    def list_availability_zones(self, region: str) -> list[str]:
        try:
            return self._client_for(region).describe_availability_zones()
        except (ClientError, BotoCoreError) as e:
            logger.error("list_availability_zones_failed", region=region, error=str(e))
            raise ComputeProviderError(
                f"unable to call aws api DescribeAvailabilityZones for {region!r}: {e}"
            ) from e
