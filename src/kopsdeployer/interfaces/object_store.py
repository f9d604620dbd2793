"""Object store interface for state-store buckets and published markers."""

from abc import ABC, abstractmethod


class ObjectStore(ABC):
    """Abstract interface over cloud object storage."""

    @abstractmethod
    def create_bucket(self, name: str, project: str) -> None:
        """Create a bucket.

        Args:
            name: Bucket name
            project: Project that will own the bucket

        Raises:
            ObjectStoreError: If creation fails
        """

    @abstractmethod
    def delete_bucket(self, name: str) -> None:
        """Delete a bucket.

        Args:
            name: Bucket name, with or without a gs:// prefix

        Raises:
            ObjectStoreError: If deletion fails
        """

    @abstractmethod
    def write_object(self, url: str, data: bytes) -> None:
        """Write data to an object URL such as gs://bucket/path.

        Raises:
            ObjectStoreError: If the write fails
        """
