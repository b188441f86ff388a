"""Unit tests for HttpDinnerCatalog, mocking the HTTP client."""

from datetime import UTC, datetime

import httpx
import pytest

from src.config.settings import DinnerApiSettings
from src.dinners.catalog import HttpDinnerCatalog
from src.dinners.dtos import DinnerCatalogUnavailableError

# =============================================================================
# Mock HTTP infrastructure
# =============================================================================

CATALOG_URL = "http://catalog.example/api/"
DINNERS_URL = "http://catalog.example/api/dinners"

PASCAL_CASE_DINNER = {
    "DinnerID": 4,
    "Title": "Geek dinner",
    "EventDate": "2026-12-01T18:30:00",
    "Description": "Bring your laptop",
    "HostedBy": "scottgu",
    "ContactPhone": "425-555-0100",
    "Address": "One Microsoft Way",
    "Country": "USA",
    "Latitude": 47.64,
    "Longitude": -122.13,
    "RSVPs": [{"RsvpID": 1, "DinnerID": 4, "AttendeeName": "haacked"}],
}

SNAKE_CASE_DINNER = {
    "id": 5,
    "title": "Code and curry",
    "event_date": "2026-11-20T19:00:00+01:00",
    "host_id": "alice",
}


class MockResponse:
    def __init__(self, *, json_data=None, status_code=200):
        self._json_data = json_data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise httpx.HTTPStatusError(
                f"HTTP {self.status_code}",
                request=httpx.Request("GET", DINNERS_URL),
                response=httpx.Response(self.status_code),
            )

    def json(self):
        if isinstance(self._json_data, Exception):
            raise self._json_data
        return self._json_data


class MockHttpClient:
    """
    Replaces httpx.AsyncClient as the http_client_class.

    The catalog calls self._http_client_class(timeout=...) and uses the result
    as an async context manager, so __call__ returns self.
    """

    def __init__(self, response: MockResponse | None = None, error: Exception | None = None):
        self.get_calls: list[str] = []
        self.client_kwargs: dict = {}
        self._response = response
        self._error = error

    def __call__(self, **kwargs):
        self.client_kwargs = kwargs
        return self

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False

    async def get(self, url: str):
        self.get_calls.append(url)
        if self._error:
            raise self._error
        return self._response


def make_catalog(http_client: MockHttpClient) -> HttpDinnerCatalog:
    return HttpDinnerCatalog(
        http_client_class=http_client,
        config=DinnerApiSettings(enabled=True, url=CATALOG_URL, timeout_seconds=3.0),
    )


# =============================================================================
# Tests
# =============================================================================


@pytest.mark.asyncio
async def test_fetch_dinners_gets_dinners_resource():
    http_client = MockHttpClient(MockResponse(json_data=[]))

    dinners = await make_catalog(http_client).fetch_dinners()

    assert dinners == []
    assert http_client.get_calls == [DINNERS_URL]
    assert http_client.client_kwargs == {"timeout": 3.0}


@pytest.mark.asyncio
async def test_fetch_dinners_maps_pascal_case_payload():
    http_client = MockHttpClient(MockResponse(json_data=[PASCAL_CASE_DINNER]))

    (dinner,) = await make_catalog(http_client).fetch_dinners()

    assert dinner.id == 4
    assert dinner.title == "Geek dinner"
    assert dinner.host_id == "scottgu"
    assert dinner.event_date == datetime(2026, 12, 1, 18, 30, tzinfo=UTC)
    assert dinner.rsvp_count == 1
    assert dinner.rsvps[0].attendee_name == "haacked"


@pytest.mark.asyncio
async def test_fetch_dinners_maps_snake_case_payload_to_utc():
    http_client = MockHttpClient(MockResponse(json_data=[SNAKE_CASE_DINNER]))

    (dinner,) = await make_catalog(http_client).fetch_dinners()

    assert dinner.id == 5
    assert dinner.host_id == "alice"
    assert dinner.event_date == datetime(2026, 11, 20, 18, 0, tzinfo=UTC)
    assert dinner.event_date.tzinfo == UTC
    assert dinner.rsvps == ()


@pytest.mark.asyncio
async def test_fetch_dinners_http_error_is_unavailable():
    http_client = MockHttpClient(MockResponse(status_code=502))

    with pytest.raises(DinnerCatalogUnavailableError):
        await make_catalog(http_client).fetch_dinners()


@pytest.mark.asyncio
async def test_fetch_dinners_connection_error_is_unavailable():
    http_client = MockHttpClient(error=httpx.ConnectError("connection refused"))

    with pytest.raises(DinnerCatalogUnavailableError):
        await make_catalog(http_client).fetch_dinners()


@pytest.mark.asyncio
async def test_fetch_dinners_malformed_payload_is_unavailable():
    http_client = MockHttpClient(MockResponse(json_data=[{"Title": "no id or date"}]))

    with pytest.raises(DinnerCatalogUnavailableError):
        await make_catalog(http_client).fetch_dinners()


@pytest.mark.asyncio
async def test_fetch_dinners_invalid_json_is_unavailable():
    http_client = MockHttpClient(MockResponse(json_data=ValueError("Expecting value")))

    with pytest.raises(DinnerCatalogUnavailableError):
        await make_catalog(http_client).fetch_dinners()
