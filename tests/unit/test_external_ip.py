"""Unit tests for external IP resolution."""

from unittest.mock import MagicMock

import pytest

from kopsdeployer.core.exceptions import ExternalIPError
from kopsdeployer.deployer.external_ip import EXTERNAL_IP_METADATA_URL, ExternalIPResolver
from kopsdeployer.interfaces.exceptions import HTTPFetchError
from kopsdeployer.interfaces.http_fetcher import HTTPFetcher

SERVICES = ["https://echo-one.example", "https://echo-two.example"]


@pytest.fixture
def http() -> MagicMock:
    """Mock HTTP fetcher."""
    return MagicMock(spec=HTTPFetcher)


def _resolver(http: MagicMock, attempts: int = 3) -> ExternalIPResolver:
    return ExternalIPResolver(http, attempts=attempts, wait_seconds=0, service_urls=SERVICES)


def _answers(responses: dict[str, str | Exception]):
    def get(url: str, headers: dict[str, str] | None = None) -> str:
        response = responses.get(url, HTTPFetchError(f"no route to {url}"))
        if isinstance(response, Exception):
            raise response
        return response

    return get


class TestResolveAdminAccessCidr:
    """Tests for ExternalIPResolver.resolve_admin_access_cidr."""

    def test_metadata_server_answer(self, http: MagicMock) -> None:
        """Test the metadata address becomes a /32 without asking services."""
        http.get.side_effect = _answers({EXTERNAL_IP_METADATA_URL: "1.2.3.4"})

        assert _resolver(http).resolve_admin_access_cidr() == "1.2.3.4/32"
        http.get.assert_called_once_with(
            EXTERNAL_IP_METADATA_URL, headers={"Metadata-Flavor": "Google"}
        )

    def test_falls_back_to_echo_service(self, http: MagicMock) -> None:
        """Test a metadata failure falls back to echo services (trailing newline)."""
        http.get.side_effect = _answers({SERVICES[0]: "5.6.7.8\n"})

        assert _resolver(http).resolve_admin_access_cidr() == "5.6.7.8/32"

    def test_invalid_answers_are_skipped(self, http: MagicMock) -> None:
        """Test non-IP bodies are treated as failures."""
        http.get.side_effect = _answers(
            {
                EXTERNAL_IP_METADATA_URL: "<html>not found</html>",
                SERVICES[0]: "rate limited",
                SERVICES[1]: "198.51.100.4",
            }
        )

        assert _resolver(http).resolve_admin_access_cidr() == "198.51.100.4/32"

    def test_every_source_failing_raises(self, http: MagicMock) -> None:
        """Test an error once all rounds over all services failed."""
        http.get.side_effect = _answers({})

        with pytest.raises(ExternalIPError) as exc_info:
            _resolver(http, attempts=3).resolve_admin_access_cidr()

        assert "external IP cannot be retrieved" in str(exc_info.value)
        # one metadata query, then three rounds over two services
        assert http.get.call_count == 1 + 3 * len(SERVICES)

    def test_services_recover_on_later_round(self, http: MagicMock) -> None:
        """Test a later round succeeds after transient failures."""
        calls = {"count": 0}

        def get(url: str, headers: dict[str, str] | None = None) -> str:
            if url == SERVICES[0]:
                calls["count"] += 1
                if calls["count"] >= 2:
                    return "192.0.2.10"
            raise HTTPFetchError("unavailable")

        http.get.side_effect = get

        assert _resolver(http).resolve_admin_access_cidr() == "192.0.2.10/32"
        assert calls["count"] == 2
