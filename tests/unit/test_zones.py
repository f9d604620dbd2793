"""Unit tests for availability zone selection."""

import random
from unittest.mock import MagicMock

import pytest

from kopsdeployer.core.exceptions import ZoneSelectionError
from kopsdeployer.deployer.zones import AWS_REGIONS, select_zones
from kopsdeployer.interfaces.compute_provider import ComputeProvider
from kopsdeployer.interfaces.exceptions import ComputeProviderError

ZONES_BY_REGION = {
    "us-east-1": ["us-east-1a", "us-east-1b", "us-east-1c", "us-east-1d"],
    "us-west-1": ["us-west-1a", "us-west-1c"],
    "eu-west-2": ["eu-west-2a", "eu-west-2b", "eu-west-2c"],
}


@pytest.fixture
def compute() -> MagicMock:
    """Mock compute provider answering from ZONES_BY_REGION."""
    provider = MagicMock(spec=ComputeProvider)
    provider.list_availability_zones.side_effect = lambda region: ZONES_BY_REGION.get(
        region, []
    )
    return provider


class TestSelectZones:
    """Tests for select_zones."""

    def test_single_zone_without_spreading(self, compute: MagicMock) -> None:
        """Test exactly one zone of a queried region is returned."""
        zones = select_zones(
            compute, 1, False, regions=list(ZONES_BY_REGION), rng=random.Random(7)
        )

        assert len(zones) == 1
        region = zones[0][:-1]
        assert zones[0] in ZONES_BY_REGION[region]

    def test_spreading_returns_every_zone_of_one_region(self, compute: MagicMock) -> None:
        """Test master count 3 with spreading lands in a region with >= 3 zones."""
        for seed in range(10):
            zones = select_zones(
                compute, 3, True, regions=list(ZONES_BY_REGION), rng=random.Random(seed)
            )

            assert len(zones) >= 3
            assert len({zone[:-1] for zone in zones}) == 1

    def test_regions_without_enough_zones_are_skipped(self, compute: MagicMock) -> None:
        """Test spreading skips regions with too few zones."""
        zones = select_zones(compute, 2, True, regions=["ap-south-1", "us-west-1"])

        assert zones == ["us-west-1a", "us-west-1c"]

    def test_each_region_queried_at_most_once(self, compute: MagicMock) -> None:
        """Test failure after trying every region exactly once."""
        with pytest.raises(ZoneSelectionError) as exc_info:
            select_zones(compute, 5, True, regions=list(ZONES_BY_REGION))

        assert "unable to find region with 5 zones" in str(exc_info.value)
        queried = [c.args[0] for c in compute.list_availability_zones.call_args_list]
        assert sorted(queried) == sorted(ZONES_BY_REGION)

    def test_regions_without_zones_fail_single_zone_selection(
        self, compute: MagicMock
    ) -> None:
        """Test an error when no candidate region has any zone."""
        with pytest.raises(ZoneSelectionError):
            select_zones(compute, 1, False, regions=["ap-south-1", "sa-east-1"])

    def test_compute_errors_propagate(self, compute: MagicMock) -> None:
        """Test a failing region query is raised instead of skipped."""
        compute.list_availability_zones.side_effect = ComputeProviderError("throttled")

        with pytest.raises(ComputeProviderError):
            select_zones(compute, 1, False)

        assert compute.list_availability_zones.call_count == 1

    def test_defaults_to_aws_regions(self, compute: MagicMock) -> None:
        """Test the built-in AWS region list is used by default."""
        compute.list_availability_zones.side_effect = lambda region: [f"{region}a"]

        zones = select_zones(compute, 1, False)

        assert zones[0][:-1] in AWS_REGIONS
