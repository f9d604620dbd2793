"""Google Cloud Storage client for state-store buckets and published files."""

from google.cloud import storage as gcp_storage

from kopsdeployer.utils.logging import get_logger

logger = get_logger(__name__)

GCS_PREFIX = "gs://"


def split_gcs_url(url: str) -> tuple[str, str]:
    """Split gs://bucket/path/to/object into (bucket, path/to/object).

    A bare bucket name (with or without the scheme) yields an empty object path.
    """
    if url.startswith(GCS_PREFIX):
        url = url[len(GCS_PREFIX) :]
    bucket, _, blob = url.partition("/")
    return bucket, blob


class GCSClient:
    """Thin wrapper around google.cloud.storage."""

    def __init__(self, client: gcp_storage.Client | None = None):
        self._client = client

    @property
    def client(self) -> gcp_storage.Client:
        """Storage API client, built on first use."""
        if self._client is None:
            self._client = gcp_storage.Client()
        return self._client

    def create_bucket(self, name: str, project: str) -> None:
        """Create a bucket owned by project.

        Raises:
            GoogleAPICallError: If the API rejects the request
        """
        logger.debug("creating_gcs_bucket", bucket=name, project=project)
        self.client.create_bucket(name, project=project)

    def delete_bucket(self, name: str) -> None:
        """Delete a bucket and every object left in it.

        Raises:
            GoogleAPICallError: If the API rejects the request
        """
        bucket_name, _ = split_gcs_url(name)
        logger.debug("deleting_gcs_bucket", bucket=bucket_name)
        self.client.bucket(bucket_name).delete(force=True)

    def write(self, url: str, data: bytes) -> None:
        """Upload data to a gs:// object URL.

        Raises:
            ValueError: If the URL does not name an object
            GoogleAPICallError: If the upload fails
        """
        bucket_name, blob_name = split_gcs_url(url)
        if not bucket_name or not blob_name:
            raise ValueError(f"not a GCS object URL: {url!r}")
        logger.debug("writing_gcs_object", bucket=bucket_name, blob=blob_name)
        self.client.bucket(bucket_name).blob(blob_name).upload_from_string(data)
