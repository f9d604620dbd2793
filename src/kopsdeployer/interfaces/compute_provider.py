"""Compute provider interface for region and zone discovery."""

from abc import ABC, abstractmethod


class ComputeProvider(ABC):
    """Abstract interface over a cloud compute API."""

    @abstractmethod
    def list_availability_zones(self, region: str) -> list[str]:
        """List availability zone names of a region.

        Args:
            region: Region to query

        Returns:
            Zone names, in the order returned by the API

        Raises:
            ComputeProviderError: If the region cannot be queried
        """
