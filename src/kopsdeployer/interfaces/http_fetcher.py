"""HTTP fetch interface."""

from abc import ABC, abstractmethod


class HTTPFetcher(ABC):
    """Fetch small documents over HTTP."""

    @abstractmethod
    def get(self, url: str, headers: dict[str, str] | None = None) -> str:
        """GET a URL and return the response body.

        Args:
            url: URL to fetch
            headers: Extra request headers

        Returns:
            Response body as text

        Raises:
            HTTPFetchError: On connection errors or non-2xx responses
        """

    @abstractmethod
    def download(self, url: str, path: str) -> None:
        """Stream a URL into a local file.

        Raises:
            HTTPFetchError: On connection errors or non-2xx responses
        """
