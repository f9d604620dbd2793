"""HTTP client for small document fetches and binary downloads."""

import requests

from kopsdeployer.interfaces.exceptions import HTTPFetchError
from kopsdeployer.interfaces.http_fetcher import HTTPFetcher
from kopsdeployer.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30


class HTTPClient(HTTPFetcher):
    """requests-based implementation of HTTPFetcher."""

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """Initialize HTTP client.

        Args:
            session: Existing requests session (optional)
            timeout: Per-request timeout (seconds)
        """
        self.session = session or requests.Session()
        self.timeout = timeout

    def get(self, url: str, headers: dict[str, str] | None = None) -> str:
        logger.debug("http_get", url=url)
        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise HTTPFetchError(f"error fetching {url}: {e}") from e
        return response.text

    def download(self, url: str, path: str) -> None:
        logger.info("http_download_started", url=url, path=path)
        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                with open(path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=1024 * 1024):
                        f.write(chunk)
        except requests.RequestException as e:
            raise HTTPFetchError(f"error downloading {url}: {e}") from e
        except OSError as e:
            raise HTTPFetchError(f"error writing {path}: {e}") from e
        logger.info("http_download_completed", url=url, path=path)
