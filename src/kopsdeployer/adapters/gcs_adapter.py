"""GCS adapter implementing ObjectStore interface."""

from google.api_core.exceptions import GoogleAPICallError

from kopsdeployer.clients.gcs_client import GCSClient
from kopsdeployer.interfaces.exceptions import ObjectStoreError
from kopsdeployer.interfaces.object_store import ObjectStore
from kopsdeployer.utils.logging import get_logger

logger = get_logger(__name__)


class GCSAdapter(ObjectStore):
    """Adapter wrapping GCSClient to implement ObjectStore."""

    def __init__(self, client: GCSClient | None = None):
        self.client = client or GCSClient()

    def create_bucket(self, name: str, project: str) -> None:
        try:
            self.client.create_bucket(name, project)
        except GoogleAPICallError as e:
            logger.error("create_bucket_failed", bucket=name, error=str(e))
            raise ObjectStoreError(f"error creating bucket {name}: {e}") from e
        logger.info("gcs_bucket_created", bucket=name)

    def delete_bucket(self, name: str) -> None:
        try:
            self.client.delete_bucket(name)
        except GoogleAPICallError as e:
            logger.error("delete_bucket_failed", bucket=name, error=str(e))
            raise ObjectStoreError(f"error deleting bucket {name}: {e}") from e
        logger.info("gcs_bucket_deleted", bucket=name)

    def write_object(self, url: str, data: bytes) -> None:
        try:
            self.client.write(url, data)
        except (GoogleAPICallError, ValueError) as e:
            logger.error("write_object_failed", url=url, error=str(e))
            raise ObjectStoreError(f"error writing {url}: {e}") from e
