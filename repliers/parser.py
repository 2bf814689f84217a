"""JSON response decoding helpers.

Every decoder follows the same order: classify the status code, then parse the
body of a 2xx response into the endpoint's result type.  Keys the client does
not model are kept in the ``extra`` mapping of the decoded object.
"""

from __future__ import annotations

import json
import logging
import math
import re
from numbers import Real
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, TypeVar

from .errors import ApiError, AuthenticationError, DecodeError, NotFoundError
from .models import (
    ADDRESS_FIELDS,
    Address,
    AddressHistory,
    AiSearchResult,
    ApiErrorEnvelope,
    DeletedListing,
    DeletedListings,
    HistoryEntry,
    Listing,
    ListingPage,
    Pagination,
    SimilarListings,
)
from .transport import RawResponse
from .utils import body_snippet

logger = logging.getLogger(__name__)

T = TypeVar("T")

_AUTH_STATUSES = {401, 403}
_ENVELOPE_STATUSES = {400, 422}

_LISTING_KEYS = {"mlsNumber", "address", "listPrice", "soldPrice", "status", "propertyType"}
_HISTORY_KEYS = {
    "mlsNumber",
    "listPrice",
    "soldPrice",
    "status",
    "listDate",
    "soldDate",
    "propertyType",
    "bedrooms",
}
_DELETED_KEYS = {"mlsNumber", "boardId", "resource", "address"}
_PAGINATION_KEYS = {"page", "numPages", "pageSize", "count"}
_ASCII_DIGITS = re.compile(r"[0-9]+")


class _ShapeError(ValueError):
    """Internal signal that a JSON value does not have the expected shape."""


# ----------------------------------------------------------------------
# public decoders
# ----------------------------------------------------------------------
def decode_listing(raw: RawResponse) -> Listing:
    """Decode ``GET /listings/{mlsNumber}``."""

    return _decode(raw, _listing)


def decode_listing_page(raw: RawResponse) -> ListingPage:
    """Decode ``POST /listings``."""

    def build(payload: Any) -> ListingPage:
        data = _object(payload, "response")
        listings = [_listing(item) for item in _array(data, "listings")]
        return ListingPage(
            listings=listings,
            pagination=_pagination(data),
            extra=_extra(data, _PAGINATION_KEYS | {"listings"}),
        )

    return _decode(raw, build)


def decode_similar_listings(raw: RawResponse) -> SimilarListings:
    """Decode ``GET /listings/{mlsNumber}/similar``."""

    def build(payload: Any) -> SimilarListings:
        data = _object(payload, "response")
        similar = [_listing(item) for item in _array(data, "similar")]
        return SimilarListings(
            similar=similar,
            pagination=_pagination(data),
            extra=_extra(data, _PAGINATION_KEYS | {"similar"}),
        )

    return _decode(raw, build)


def decode_ai_search(raw: RawResponse) -> AiSearchResult:
    """Decode ``POST /nlp``."""

    def build(payload: Any) -> AiSearchResult:
        data = _object(payload, "response")
        url = _text(data, "url", required=True)
        params = data.get("params")
        if params is None:
            params = {}
        elif not isinstance(params, dict):
            raise _ShapeError(f"'params' must be an object, got {_type_name(params)}")
        return AiSearchResult(
            url=url,
            params=dict(params),
            prompt=_text(data, "prompt"),
            nlp_id=_text(data, "nlpId"),
            extra=_extra(data, {"url", "params", "prompt", "nlpId"}),
        )

    return _decode(raw, build)


def decode_address_history(raw: RawResponse) -> AddressHistory:
    """Decode ``GET /listings/history``."""

    def build(payload: Any) -> AddressHistory:
        data = _object(payload, "response")
        history = [_history_entry(item) for item in _array(data, "history")]
        return AddressHistory(history=history, extra=_extra(data, {"history"}))

    return _decode(raw, build)


def decode_deleted_listings(raw: RawResponse) -> DeletedListings:
    """Decode ``GET /listings/deleted``."""

    def build(payload: Any) -> DeletedListings:
        data = _object(payload, "response")
        listings = [_deleted_listing(item) for item in _array(data, "listings")]
        return DeletedListings(
            listings=listings,
            pagination=_pagination(data),
            extra=_extra(data, _PAGINATION_KEYS | {"listings"}),
        )

    return _decode(raw, build)


# ----------------------------------------------------------------------
# status handling
# ----------------------------------------------------------------------
def check_status(raw: RawResponse) -> None:
    """Raise the error matching a non-2xx status; return quietly on 2xx."""

    status = raw.status_code
    if 200 <= status < 300:
        return
    if status in _AUTH_STATUSES:
        raise AuthenticationError(
            f"API key rejected (HTTP {status}).",
            status_code=status,
        )
    if status == 404:
        target = raw.path or "resource"
        raise NotFoundError(f"Nothing found at {target}.", path=raw.path)
    if status in _ENVELOPE_STATUSES:
        envelope = parse_error_envelope(raw)
        raise ApiError(envelope.code, envelope.message, status_code=status)
    raise ApiError(status, f"HTTP {status}", status_code=status)


def parse_error_envelope(raw: RawResponse) -> ApiErrorEnvelope:
    """Parse the structured error body the API sends with 400/422 responses.

    Accepted shapes are ``{"message": ...}``, ``{"error": ...}`` and
    ``{"errors": [{"msg": ...}, ...]}``, each with an optional ``code``.
    """

    payload = _load_json(raw)
    if not isinstance(payload, dict):
        raise DecodeError(
            "Error response is not a JSON object",
            snippet=body_snippet(raw.body),
            status_code=raw.status_code,
        )

    message = _envelope_message(payload)
    if message is None:
        raise DecodeError(
            "Error response has no message",
            snippet=body_snippet(raw.body),
            status_code=raw.status_code,
        )
    code = payload.get("code")
    if not isinstance(code, (int, str)) or isinstance(code, bool):
        code = raw.status_code
    return ApiErrorEnvelope(message=message, code=code)


def _envelope_message(payload: Mapping[str, Any]) -> Optional[str]:
    for key in ("message", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    errors = payload.get("errors")
    if isinstance(errors, list):
        messages = []
        for item in errors:
            if isinstance(item, dict) and isinstance(item.get("msg"), str):
                param = item.get("param")
                messages.append(f"{param}: {item['msg']}" if param else item["msg"])
            elif isinstance(item, str):
                messages.append(item)
        if messages:
            return "; ".join(messages)
    return None


# ----------------------------------------------------------------------
# shape helpers
# ----------------------------------------------------------------------
def _decode(raw: RawResponse, build: Callable[[Any], T]) -> T:
    check_status(raw)
    payload = _load_json(raw)
    try:
        return build(payload)
    except _ShapeError as exc:
        logger.debug("Unexpected response shape for %s: %s", raw.path, exc)
        raise DecodeError(str(exc), snippet=body_snippet(raw.body), status_code=raw.status_code) from exc


def _load_json(raw: RawResponse) -> Any:
    try:
        return json.loads(raw.body.decode("utf-8"), parse_constant=_reject_constant)
    except (UnicodeDecodeError, ValueError) as exc:
        raise DecodeError(
            f"Response is not valid JSON: {exc}",
            snippet=body_snippet(raw.body),
            status_code=raw.status_code,
        ) from exc


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a JSON value")


def _listing(payload: Any) -> Listing:
    data = _object(payload, "listing")
    property_type = _text(data, "propertyType")
    if property_type is None:
        details = data.get("details")
        if isinstance(details, dict):
            property_type = _text(details, "propertyType")
    return Listing(
        mls_number=_text(data, "mlsNumber", required=True),
        address=_address(data.get("address")),
        list_price=_number(data, "listPrice"),
        sold_price=_number(data, "soldPrice"),
        status=_text(data, "status"),
        property_type=property_type,
        extra=_extra(data, _LISTING_KEYS),
    )


def _history_entry(payload: Any) -> HistoryEntry:
    data = _object(payload, "history entry")
    return HistoryEntry(
        mls_number=_text(data, "mlsNumber", required=True),
        list_price=_number(data, "listPrice"),
        sold_price=_number(data, "soldPrice"),
        status=_text(data, "status"),
        list_date=_text(data, "listDate"),
        sold_date=_text(data, "soldDate"),
        property_type=_text(data, "propertyType"),
        bedrooms=_integer(data, "bedrooms"),
        extra=_extra(data, _HISTORY_KEYS),
    )


def _deleted_listing(payload: Any) -> DeletedListing:
    data = _object(payload, "deleted listing")
    listing_updated = None
    timestamps = data.get("timestamps")
    if isinstance(timestamps, dict):
        listing_updated = _text(timestamps, "listingUpdated")
    elif timestamps is not None:
        raise _ShapeError(f"'timestamps' must be an object, got {_type_name(timestamps)}")
    return DeletedListing(
        mls_number=_text(data, "mlsNumber", required=True),
        board_id=_integer(data, "boardId"),
        resource=_text(data, "resource"),
        address=_address(data.get("address")),
        listing_updated=listing_updated,
        extra=_extra(data, _DELETED_KEYS),
    )


def _address(payload: Any) -> Optional[Address]:
    if payload is None:
        return None
    data = _object(payload, "address")
    values = {attr: _text(data, key, coerce=True) for attr, key in ADDRESS_FIELDS}
    modeled = {key for _, key in ADDRESS_FIELDS}
    return Address(extra=_extra(data, modeled), **values)


def _pagination(data: Mapping[str, Any]) -> Pagination:
    return Pagination(
        page=_integer(data, "page"),
        num_pages=_integer(data, "numPages"),
        page_size=_integer(data, "pageSize"),
        count=_integer(data, "count"),
    )


def _object(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise _ShapeError(f"Expected {what} to be a JSON object, got {_type_name(value)}")
    return value


def _array(data: Mapping[str, Any], key: str) -> List[Any]:
    if key not in data:
        raise _ShapeError(f"Missing required field '{key}'")
    value = data[key]
    if not isinstance(value, list):
        raise _ShapeError(f"'{key}' must be an array, got {_type_name(value)}")
    return value


def _text(data: Mapping[str, Any], key: str, *, required: bool = False, coerce: bool = False) -> Optional[str]:
    value = data.get(key)
    if value is None:
        if required:
            raise _ShapeError(f"Missing required field '{key}'")
        return None
    if coerce and isinstance(value, float) and value.is_integer():
        value = str(int(value))
    elif coerce and isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        raise _ShapeError(f"'{key}' must be a string, got {_type_name(value)}")
    if required and not value.strip():
        raise _ShapeError(f"Required field '{key}' is empty")
    return value


def _number(data: Mapping[str, Any], key: str) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    number = None
    if isinstance(value, Real) and not isinstance(value, bool):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.replace(",", ""))
        except ValueError:
            pass
    if number is not None and math.isfinite(number):
        return number
    raise _ShapeError(f"'{key}' must be a number, got {value!r}")


def _integer(data: Mapping[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise _ShapeError(f"'{key}' must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _ASCII_DIGITS.fullmatch(value.strip()):
        return int(value.strip())
    raise _ShapeError(f"'{key}' must be an integer, got {value!r}")


def _extra(data: Mapping[str, Any], modeled: set[str] | frozenset[str]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if key not in modeled}


def _type_name(value: Any) -> str:
    names: Tuple[Tuple[type, str], ...] = (
        (bool, "boolean"),
        (dict, "object"),
        (list, "array"),
        (str, "string"),
        (int, "number"),
        (float, "number"),
    )
    if value is None:
        return "null"
    for kind, name in names:
        if isinstance(value, kind):
            return name
    return type(value).__name__
