"""AWS client for EC2 region and zone lookups."""

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from kopsdeployer.utils.logging import get_logger
from kopsdeployer.utils.retry import retry_on_exception

logger = get_logger(__name__)


class AWSClient:
    """AWS client for EC2 operations in a single region."""

    def __init__(
        self,
        region: str,
        profile: str | None = None,
        session: boto3.Session | None = None,
    ):
        """Initialize AWS client.

        Args:
            region: AWS region
            profile: AWS profile name (optional)
            session: Existing boto3 session (optional, overrides profile)
        """
        self.region = region
        self.profile = profile

        if session:
            self.session = session
        elif profile:
            self.session = boto3.Session(profile_name=profile, region_name=region)
        else:
            self.session = boto3.Session(region_name=region)

        self.ec2 = self.session.client(
            "ec2",
            region_name=region,
            config=Config(retries={"max_attempts": 3, "mode": "standard"}),
        )

        logger.debug("aws_client_initialized", region=region, profile=profile)

    @retry_on_exception(exceptions=(BotoCoreError,), max_attempts=3)
    def describe_availability_zones(self) -> list[str]:
        """List availability zone names in the client's region.

        Returns:
            Zone names

        Raises:
            ClientError: If the API rejects the call
            BotoCoreError: If the API cannot be reached after retries
        """
        logger.debug("describing_availability_zones", region=self.region)

        try:
            response = self.ec2.describe_availability_zones()
        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            logger.error(
                "describe_availability_zones_failed",
                region=self.region,
                error_code=error_code,
            )
            raise

        zones = [zone["ZoneName"] for zone in response.get("AvailabilityZones", [])]
        logger.debug("availability_zones_described", region=self.region, count=len(zones))
        return zones
