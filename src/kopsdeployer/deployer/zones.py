"""Random availability zone selection for AWS clusters."""

import random

from kopsdeployer.core.exceptions import ZoneSelectionError
from kopsdeployer.interfaces.compute_provider import ComputeProvider
from kopsdeployer.utils.logging import get_logger

logger = get_logger(__name__)

AWS_REGIONS = [
    "ap-south-1",
    "eu-west-2",
    "eu-west-1",
    "ap-northeast-2",
    "ap-northeast-1",
    "sa-east-1",
    "ca-central-1",
    # ap-southeast-1 lacks capacity for the default instance types
    "ap-southeast-2",
    "eu-central-1",
    "us-east-1",
    "us-east-2",
    "us-west-1",
    "us-west-2",
    # eu-west-3 does not offer every instance type we use
]


def select_zones(
    compute: ComputeProvider,
    master_count: int,
    multiple_zones: bool,
    regions: list[str] | None = None,
    rng: random.Random | None = None,
) -> list[str]:
    """Pick availability zones from one randomly chosen region.

    Regions are tried in a random order, each at most once. With
    multiple_zones, the first region offering at least master_count zones wins
    and all of its zones are returned; otherwise one random zone of the first
    region tried is returned.

    A failure to query a region is raised immediately instead of moving on to
    the next region.

    Args:
        compute: Compute API used to list zones per region
        master_count: Number of masters the cluster will run
        multiple_zones: Spread the cluster across every zone of the region
        regions: Candidate regions (defaults to AWS_REGIONS)
        rng: Random source (defaults to the module-level generator)

    Returns:
        Zone names, all in the same region

    Raises:
        ComputeProviderError: If a region cannot be queried
        ZoneSelectionError: If no region has enough zones
    """
    candidates = list(regions if regions is not None else AWS_REGIONS)
    rng = rng or random.Random()

    for region in rng.sample(candidates, len(candidates)):
        zones = compute.list_availability_zones(region)

        if multiple_zones:
            if len(zones) >= master_count:
                logger.info("launching_cluster_in_region", region=region, zones=zones)
                return list(zones)
            logger.debug("region_has_too_few_zones", region=region, zones=len(zones))
            continue

        if not zones:
            logger.debug("region_has_no_zones", region=region)
            continue
        zone = rng.choice(zones)
        logger.info("launching_cluster_in_region", region=region, zones=[zone])
        return [zone]

    raise ZoneSelectionError(f"unable to find region with {master_count} zones")
