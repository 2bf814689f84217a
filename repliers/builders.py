"""Request builders, one per endpoint.

Builders never touch the network.  Each turns a parameter record into an
:class:`~repliers.models.EndpointRequest` or raises
:class:`~repliers.errors.ValidationError`.
"""

from __future__ import annotations

import math
from datetime import date
from numbers import Real
from typing import Any, List, Optional, Sequence
from urllib.parse import quote

from .errors import ValidationError
from .models import (
    AddressHistoryQuery,
    AiSearchQuery,
    DeletedListingsQuery,
    EndpointRequest,
    ListingStatus,
    SearchFilters,
    SimilarListingsQuery,
)
from .utils import compact_dict, is_blank, query_pairs


def build_search_request(filters: SearchFilters) -> EndpointRequest:
    """``POST /listings`` with the present filters as a JSON body."""

    min_price = _optional_number(filters.min_price, "min_price", minimum=0)
    max_price = _optional_number(filters.max_price, "max_price", minimum=0)
    if min_price is not None and max_price is not None and min_price > max_price:
        raise ValidationError(f"min_price ({min_price}) must not exceed max_price ({max_price}).")

    body = compact_dict(
        {
            "city": _optional_text(filters.city, "city"),
            "status": _statuses(filters.status) or None,
            "minPrice": min_price,
            "maxPrice": max_price,
            "bedrooms": _optional_int(filters.bedrooms, "bedrooms", minimum=0),
            "propertyType": _unique_texts(filters.property_type, "property_type") or None,
            "page": _optional_int(filters.page, "page", minimum=1),
            "resultsPerPage": _optional_int(filters.results_per_page, "results_per_page", minimum=1),
            "boardId": _optional_text(filters.board_id, "board_id"),
        }
    )
    return EndpointRequest("POST", "/listings", body=body)


def build_ai_search_request(query: AiSearchQuery) -> EndpointRequest:
    """``POST /nlp`` with the prompt and optional conversation id."""

    if is_blank(query.prompt):
        raise ValidationError("An AI search prompt is required.")
    body = compact_dict(
        {
            "prompt": query.prompt.strip(),
            "boardId": _optional_text(query.board_id, "board_id"),
            "nlpId": _optional_text(query.nlp_id, "nlp_id"),
        }
    )
    return EndpointRequest("POST", "/nlp", body=body)


def build_get_listing_request(mls_number: str, board_id: Optional[str] = None) -> EndpointRequest:
    """``GET /listings/{mlsNumber}``."""

    path = f"/listings/{_mls_segment(mls_number)}"
    return EndpointRequest("GET", path, query=query_pairs([("boardId", _optional_text(board_id, "board_id"))]))


def build_similar_listings_request(query: SimilarListingsQuery) -> EndpointRequest:
    """``GET /listings/{mlsNumber}/similar`` with optional radius and price range."""

    path = f"/listings/{_mls_segment(query.mls_number)}/similar"
    radius = _optional_number(query.radius, "radius")
    if radius is not None and radius <= 0:
        raise ValidationError("radius must be greater than zero.")
    params = query_pairs(
        [
            ("boardId", _optional_text(query.board_id, "board_id")),
            ("radius", radius),
            ("listPriceRange", _optional_number(query.list_price_range, "list_price_range", minimum=0)),
            ("fields", _optional_text(query.fields, "fields")),
            ("sortBy", _optional_text(query.sort_by, "sort_by")),
        ]
    )
    return EndpointRequest("GET", path, query=params)


def build_address_history_request(query: AddressHistoryQuery) -> EndpointRequest:
    """``GET /listings/history`` for one street address."""

    missing = [
        name
        for name in ("street_number", "street_name", "city", "state")
        if is_blank(getattr(query, name))
    ]
    if missing:
        raise ValidationError(f"Address history requires: {', '.join(missing)}.")
    params = query_pairs(
        [
            ("streetNumber", query.street_number.strip()),
            ("streetName", query.street_name.strip()),
            ("city", query.city.strip()),
            ("state", query.state.strip()),
            ("zip", _optional_text(query.zip, "zip")),
            ("boardId", _optional_text(query.board_id, "board_id")),
        ]
    )
    return EndpointRequest("GET", "/listings/history", query=params)


def build_deleted_listings_request(query: DeletedListingsQuery) -> EndpointRequest:
    """``GET /listings/deleted`` for a date window."""

    min_date = _optional_date(query.min_date, "min_date")
    max_date = _optional_date(query.max_date, "max_date")
    updated_on = _optional_date(query.updated_on, "updated_on")
    if min_date is not None and max_date is not None and min_date > max_date:
        raise ValidationError(f"min_date ({min_date}) must not be after max_date ({max_date}).")
    if updated_on is not None and (min_date is not None or max_date is not None):
        raise ValidationError("updated_on cannot be combined with min_date or max_date.")

    params = query_pairs(
        [
            ("minUpdatedOn", min_date),
            ("maxUpdatedOn", max_date),
            ("updatedOn", updated_on),
            ("page", _optional_int(query.page, "page", minimum=1)),
            ("resultsPerPage", _optional_int(query.results_per_page, "results_per_page", minimum=1)),
            ("boardId", _optional_text(query.board_id, "board_id")),
        ]
    )
    return EndpointRequest("GET", "/listings/deleted", query=params)


# ----------------------------------------------------------------------
# helpers
# ----------------------------------------------------------------------
def _mls_segment(mls_number: str) -> str:
    if not isinstance(mls_number, str) or is_blank(mls_number):
        raise ValidationError("An MLS number is required.")
    return quote(mls_number.strip(), safe="")


def _optional_text(value: Any, name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string, got {type(value).__name__}.")
    value = value.strip()
    return value or None


def _optional_number(value: Any, name: str, *, minimum: Optional[float] = None) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValidationError(f"{name} must be a number, got {value!r}.")
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be a finite number, got {value!r}.")
    if minimum is not None and value < minimum:
        raise ValidationError(f"{name} must be at least {minimum}, got {value}.")
    return value


def _optional_int(value: Any, name: str, *, minimum: int) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}.")
    if value < minimum:
        raise ValidationError(f"{name} must be at least {minimum}, got {value}.")
    return value


def _optional_date(value: Optional[str], name: str) -> Optional[str]:
    if is_blank(value):
        return None
    try:
        return date.fromisoformat(str(value).strip()).isoformat()
    except ValueError as exc:
        raise ValidationError(f"{name} must be an ISO 8601 date (YYYY-MM-DD), got {value!r}.") from exc


def _statuses(values: Sequence[ListingStatus | str]) -> List[str]:
    statuses: List[str] = []
    for value in _as_sequence(values, "status"):
        try:
            status = ListingStatus(value)
        except ValueError as exc:
            allowed = ", ".join(item.value for item in ListingStatus)
            raise ValidationError(f"Unknown listing status {value!r}; expected one of {allowed}.") from exc
        if status.value not in statuses:
            statuses.append(status.value)
    return statuses


def _unique_texts(values: Sequence[str], name: str) -> List[str]:
    texts: List[str] = []
    for value in _as_sequence(values, name):
        text = _optional_text(value, name)
        if text and text not in texts:
            texts.append(text)
    return texts


def _as_sequence(values: Any, name: str) -> Sequence[Any]:
    if values is None:
        return ()
    if isinstance(values, (str, bytes)):
        # a bare string would otherwise be iterated character by character
        return (values,)
    try:
        return list(values)
    except TypeError as exc:
        raise ValidationError(f"{name} must be a sequence, got {type(values).__name__}.") from exc
