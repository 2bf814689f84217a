from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from typing import Any
from unittest.mock import MagicMock

import pytest

from repliers.client import RepliersClient
from repliers.constants import API_KEY_HEADER
from repliers.errors import (
    ApiError,
    AuthenticationError,
    DecodeError,
    NotFoundError,
    TransportError,
    ValidationError,
)
from repliers.models import (
    AddressHistoryQuery,
    DeletedListingsQuery,
    EndpointRequest,
    SearchFilters,
    SimilarListingsQuery,
)
from repliers.transport import RawResponse


def _raw(status: int, payload: Any = None, *, path: str = "/") -> RawResponse:
    body = b"" if payload is None else json.dumps(payload).encode("utf-8")
    return RawResponse(status_code=status, body=body, headers={}, path=path)


def _client(*responses: RawResponse) -> tuple[RepliersClient, MagicMock]:
    transport = MagicMock()
    if len(responses) == 1:
        transport.send.return_value = responses[0]
    else:
        transport.send.side_effect = list(responses)
    return RepliersClient(api_key="test-key", transport=transport), transport


def test_get_listing_decodes_listing() -> None:
    client, transport = _client(_raw(200, {"mlsNumber": "RTC2788401", "listPrice": 750000}))

    listing = client.get_listing("RTC2788401")

    assert listing.mls_number == "RTC2788401"
    assert listing.list_price == 750000
    request, credentials = transport.send.call_args.args
    assert request == EndpointRequest("GET", "/listings/RTC2788401")
    assert credentials.api_key == "test-key"
    assert credentials.base_url == "https://api.repliers.io"


def test_get_listing_is_idempotent_against_unchanged_backend() -> None:
    payload = {"mlsNumber": "RTC2788401", "listPrice": 750000, "details": {"numBedrooms": 3}}
    client, transport = _client(_raw(200, payload), _raw(200, payload))

    first = client.get_listing("RTC2788401")
    second = client.get_listing("RTC2788401")

    assert first == second
    assert first is not second
    assert transport.send.call_count == 2
    first_request = transport.send.call_args_list[0].args[0]
    second_request = transport.send.call_args_list[1].args[0]
    assert first_request == second_request


def test_inverted_deleted_range_never_reaches_transport() -> None:
    client, transport = _client(_raw(200, {"listings": []}))

    with pytest.raises(ValidationError):
        client.get_deleted_listings(DeletedListingsQuery(min_date="2025-01-01", max_date="2024-12-31"))

    transport.send.assert_not_called()


def test_inverted_price_range_never_reaches_transport() -> None:
    client, transport = _client(_raw(200, {"listings": []}))

    with pytest.raises(ValidationError):
        client.search_listings(SearchFilters(min_price=2, max_price=1))

    transport.send.assert_not_called()


def test_similar_listings_not_found() -> None:
    client, _ = _client(_raw(404, {"message": "not found"}, path="/listings/MISSING/similar"))

    with pytest.raises(NotFoundError):
        client.get_similar_listings("MISSING")


def test_address_history_not_found_is_not_found_error() -> None:
    client, _ = _client(_raw(404, path="/listings/history"))
    query = AddressHistoryQuery(street_number="2031", street_name="Main St", city="Mt Juliet", state="TN")

    with pytest.raises(NotFoundError):
        client.get_address_history(query)


def test_search_listings_sends_filters_and_decodes_page() -> None:
    client, transport = _client(
        _raw(200, {"page": 1, "numPages": 1, "pageSize": 1, "count": 1, "listings": [{"mlsNumber": "A1"}]})
    )

    page = client.search_listings(SearchFilters(city="Toronto", status=["Active"], results_per_page=1))

    request = transport.send.call_args.args[0]
    assert request.method == "POST"
    assert request.body == {"city": "Toronto", "status": ["Active"], "resultsPerPage": 1}
    assert page.listings[0].mls_number == "A1"
    assert page.pagination.count == 1


def test_search_listings_without_filters_sends_empty_body() -> None:
    client, transport = _client(_raw(200, {"listings": []}))

    page = client.search_listings()

    assert transport.send.call_args.args[0].body == {}
    assert page.listings == []


def test_ai_search_accepts_plain_prompt() -> None:
    client, transport = _client(_raw(200, {"url": "https://api.repliers.io/listings?city=Toronto"}))

    result = client.ai_search("condos in Toronto", nlp_id="n-1")

    assert transport.send.call_args.args[0].body == {"prompt": "condos in Toronto", "nlpId": "n-1"}
    assert result.url == "https://api.repliers.io/listings?city=Toronto"
    assert result.params == {}


def test_similar_listings_query_record() -> None:
    client, transport = _client(_raw(200, {"similar": [{"mlsNumber": "S1"}]}))

    result = client.get_similar_listings(SimilarListingsQuery(mls_number="N1", radius=2.5))

    assert transport.send.call_args.args[0].query == (("radius", "2.5"),)
    assert result.similar[0].mls_number == "S1"


@pytest.mark.parametrize(
    "response, error",
    [
        (_raw(401, {"message": "bad key"}), AuthenticationError),
        (_raw(422, {"message": "bad filter"}), ApiError),
        (_raw(500), ApiError),
        (_raw(200, {"unexpected": True}), DecodeError),
    ],
)
def test_errors_propagate_unchanged(response: RawResponse, error: type) -> None:
    client, _ = _client(response)

    with pytest.raises(error):
        client.get_listing("X1")


def test_transport_errors_propagate_unchanged() -> None:
    client, transport = _client(_raw(200))
    failure = TransportError("timed out", timed_out=True)
    transport.send.side_effect = failure

    with pytest.raises(TransportError) as excinfo:
        client.get_deleted_listings()

    assert excinfo.value is failure


@pytest.mark.parametrize("api_key", ["", "   "])
def test_client_requires_api_key(api_key: str) -> None:
    with pytest.raises(ValidationError):
        RepliersClient(api_key=api_key, transport=MagicMock())


def test_client_rejects_relative_base_url() -> None:
    with pytest.raises(ValidationError):
        RepliersClient(api_key="k", base_url="api.repliers.io", transport=MagicMock())


def test_client_repr_hides_api_key() -> None:
    client = RepliersClient(api_key="super-secret", base_url="https://api.example.com/", transport=MagicMock())

    assert "super-secret" not in repr(client)
    assert "super-secret" not in repr(client.credentials)
    assert client.base_url == "https://api.example.com"


def test_context_manager_closes_transport() -> None:
    transport = MagicMock()

    with RepliersClient(api_key="k", transport=transport):
        pass

    transport.close.assert_called_once_with()


def test_from_env_reads_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("REPLIERS_API_KEY", "env-key")
    monkeypatch.setenv("REPLIERS_BASE_URL", "https://sandbox.example.com")
    transport = MagicMock()

    client = RepliersClient.from_env(env_file=str(tmp_path / "missing.env"), transport=transport)

    assert client.credentials.api_key == "env-key"
    assert client.base_url == "https://sandbox.example.com"
    assert client.transport is transport


def test_concurrent_calls_do_not_mix_responses() -> None:
    transport = MagicMock()

    def send(request: EndpointRequest, credentials) -> RawResponse:
        mls_number = request.path.rsplit("/", 1)[-1]
        return _raw(200, {"mlsNumber": mls_number, "listPrice": len(mls_number)}, path=request.path)

    transport.send.side_effect = send
    client = RepliersClient(api_key="k", transport=transport)
    numbers = [f"MLS{index:03d}" for index in range(40)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        listings = list(pool.map(client.get_listing, numbers))

    assert [listing.mls_number for listing in listings] == numbers


def test_end_to_end_with_patched_session(monkeypatch: pytest.MonkeyPatch) -> None:
    session = MagicMock()
    session.headers = {}
    response = MagicMock()
    response.status_code = 200
    response.content = b'{"mlsNumber": "RTC2788401", "listPrice": 750000}'
    response.headers = {}
    session.request.return_value = response
    monkeypatch.setattr("repliers.transport.requests.Session", lambda: session)

    client = RepliersClient(api_key="live-key", timeout=7)
    listing = client.get_listing("RTC2788401", board_id="16")

    assert listing.list_price == 750000
    args, kwargs = session.request.call_args
    assert args == ("GET", "https://api.repliers.io/listings/RTC2788401?boardId=16")
    assert kwargs["headers"][API_KEY_HEADER] == "live-key"
    assert kwargs["timeout"] == 7
