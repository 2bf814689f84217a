"""Data models used by the Repliers client."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import urlencode, urlparse

from .constants import DEFAULT_BASE_URL
from .errors import ValidationError


class ListingStatus(str, Enum):
    """Listing status values accepted by the search endpoint."""

    ACTIVE = "Active"
    SOLD = "Sold"
    LEASED = "Leased"
    EXPIRED = "Expired"
    CANCELLED = "Cancelled"
    SUSPENDED = "Suspended"


@dataclass(frozen=True, slots=True)
class Credentials:
    """API key and base URL used for every request made by one client."""

    api_key: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL

    def __post_init__(self) -> None:
        api_key = (self.api_key or "").strip()
        if not api_key:
            raise ValidationError("An API key is required.")
        base_url = (self.base_url or "").strip().rstrip("/")
        parsed = urlparse(base_url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValidationError(f"Base URL must be an absolute http(s) URL, got {self.base_url!r}.")
        object.__setattr__(self, "api_key", api_key)
        object.__setattr__(self, "base_url", base_url)


# ----------------------------------------------------------------------
# request side
# ----------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class EndpointRequest:
    """A fully described HTTP request for one endpoint call.

    ``query`` holds only the parameters that are present.  A request carries
    either query parameters or a JSON body, never both.
    """

    method: str
    path: str
    query: Tuple[Tuple[str, str], ...] = ()
    body: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        if self.method not in {"GET", "POST"}:
            raise ValueError(f"Unsupported method {self.method!r}")
        if not self.path.startswith("/"):
            raise ValueError(f"Path must be absolute, got {self.path!r}")
        if self.body is not None and self.query:
            raise ValueError("A request cannot carry both query parameters and a JSON body")

    def url(self, base_url: str) -> str:
        url = base_url.rstrip("/") + self.path
        if self.query:
            url = f"{url}?{urlencode(self.query)}"
        return url


@dataclass(frozen=True, slots=True)
class SearchFilters:
    """Filters for the listings search.  Every field is optional."""

    city: Optional[str] = None
    status: Sequence[ListingStatus | str] = ()
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    bedrooms: Optional[int] = None
    property_type: Sequence[str] = ()
    page: Optional[int] = None
    results_per_page: Optional[int] = None
    board_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class AiSearchQuery:
    """A natural-language search prompt."""

    prompt: str
    board_id: Optional[str] = None
    nlp_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SimilarListingsQuery:
    mls_number: str
    radius: Optional[float] = None
    list_price_range: Optional[float] = None
    board_id: Optional[str] = None
    fields: Optional[str] = None
    sort_by: Optional[str] = None


@dataclass(frozen=True, slots=True)
class AddressHistoryQuery:
    """Address whose listing history is requested.

    ``street_number``, ``street_name``, ``city`` and ``state`` are required.
    """

    street_number: str
    street_name: str
    city: str
    state: str
    zip: Optional[str] = None
    board_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class DeletedListingsQuery:
    """Date window and paging for deleted listings.

    Dates are ISO 8601 calendar dates (``YYYY-MM-DD``).  ``updated_on`` selects
    a single day and cannot be combined with ``min_date``/``max_date``.
    """

    min_date: Optional[str] = None
    max_date: Optional[str] = None
    updated_on: Optional[str] = None
    page: Optional[int] = None
    results_per_page: Optional[int] = None
    board_id: Optional[str] = None


# ----------------------------------------------------------------------
# response side
# ----------------------------------------------------------------------
ADDRESS_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("street_number", "streetNumber"),
    ("street_direction", "streetDirection"),
    ("street_name", "streetName"),
    ("street_suffix", "streetSuffix"),
    ("unit_number", "unitNumber"),
    ("city", "city"),
    ("area", "area"),
    ("district", "district"),
    ("neighborhood", "neighborhood"),
    ("state", "state"),
    ("zip", "zip"),
    ("country", "country"),
)


@dataclass(slots=True)
class Address:
    """Postal address attached to a listing.

    Attributes
    ----------
    street_number, street_direction, street_name, street_suffix, unit_number:
        Street components as reported by the board.
    city, area, district, neighborhood, state, zip, country:
        Locality components.
    extra:
        Address keys the client does not model (e.g. ``majorIntersection``).
    """

    street_number: Optional[str] = None
    street_direction: Optional[str] = None
    street_name: Optional[str] = None
    street_suffix: Optional[str] = None
    unit_number: Optional[str] = None
    city: Optional[str] = None
    area: Optional[str] = None
    district: Optional[str] = None
    neighborhood: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def one_line(self) -> str:
        """Return a human readable single line address."""

        street = " ".join(
            part
            for part in (
                self.street_number,
                self.street_direction,
                self.street_name,
                self.street_suffix,
            )
            if part
        )
        if self.unit_number:
            street = f"{street} #{self.unit_number}" if street else f"#{self.unit_number}"
        parts = [part for part in (street, self.city, self.state, self.zip) if part]
        return ", ".join(parts)

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        for attr, key in ADDRESS_FIELDS:
            value = getattr(self, attr)
            if value is not None:
                data[key] = value
        return data


@dataclass(slots=True)
class Listing:
    """A single property listing returned by the API.

    Attributes
    ----------
    mls_number:
        Identifier assigned by the listing service.  Never empty.
    address:
        Decoded address, or ``None`` when the API omitted it.
    list_price, sold_price:
        Prices as numbers.  The API sometimes sends numeric strings; those are
        converted.
    status:
        Status string as reported (e.g. ``"A"``, ``"Active"``).
    property_type:
        Top-level ``propertyType`` or, failing that, ``details.propertyType``.
    extra:
        Every top-level key that is not modeled above, kept verbatim so that
        fields added to the API are never lost.
    """

    mls_number: str
    address: Optional[Address] = None
    list_price: Optional[float] = None
    sold_price: Optional[float] = None
    status: Optional[str] = None
    property_type: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        """Return the listing as an API-shaped mapping, extras included."""

        data: Dict[str, Any] = dict(self.extra)
        data["mlsNumber"] = self.mls_number
        if self.address is not None:
            data["address"] = self.address.as_dict()
        if self.list_price is not None:
            data["listPrice"] = self.list_price
        if self.sold_price is not None:
            data["soldPrice"] = self.sold_price
        if self.status is not None:
            data["status"] = self.status
        details = self.extra.get("details")
        from_details = isinstance(details, dict) and details.get("propertyType") == self.property_type
        if self.property_type is not None and not from_details:
            data["propertyType"] = self.property_type
        return data


@dataclass(slots=True)
class Pagination:
    """Paging cursor passed through from the API unchanged."""

    page: Optional[int] = None
    num_pages: Optional[int] = None
    page_size: Optional[int] = None
    count: Optional[int] = None

    def as_dict(self) -> Dict[str, Any]:
        data = {
            "page": self.page,
            "numPages": self.num_pages,
            "pageSize": self.page_size,
            "count": self.count,
        }
        return {key: value for key, value in data.items() if value is not None}


@dataclass(slots=True)
class ListingPage:
    """One page of search results."""

    listings: List[Listing] = field(default_factory=list)
    pagination: Pagination = field(default_factory=Pagination)
    extra: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        data.update(self.pagination.as_dict())
        data["listings"] = [listing.as_dict() for listing in self.listings]
        return data


@dataclass(slots=True)
class SimilarListings:
    """Listings comparable to a reference listing."""

    similar: List[Listing] = field(default_factory=list)
    pagination: Pagination = field(default_factory=Pagination)
    extra: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        data.update(self.pagination.as_dict())
        data["similar"] = [listing.as_dict() for listing in self.similar]
        return data


@dataclass(slots=True)
class AiSearchResult:
    """Structured search produced from a natural-language prompt."""

    url: str
    params: Dict[str, Any] = field(default_factory=dict)
    prompt: Optional[str] = None
    nlp_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        data["url"] = self.url
        data["params"] = dict(self.params)
        if self.prompt is not None:
            data["prompt"] = self.prompt
        if self.nlp_id is not None:
            data["nlpId"] = self.nlp_id
        return data


@dataclass(slots=True)
class HistoryEntry:
    """One past listing of an address."""

    mls_number: str
    list_price: Optional[float] = None
    sold_price: Optional[float] = None
    status: Optional[str] = None
    list_date: Optional[str] = None
    sold_date: Optional[str] = None
    property_type: Optional[str] = None
    bedrooms: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        data["mlsNumber"] = self.mls_number
        for key, value in (
            ("listPrice", self.list_price),
            ("soldPrice", self.sold_price),
            ("status", self.status),
            ("listDate", self.list_date),
            ("soldDate", self.sold_date),
            ("propertyType", self.property_type),
            ("bedrooms", self.bedrooms),
        ):
            if value is not None:
                data[key] = value
        return data


@dataclass(slots=True)
class AddressHistory:
    history: List[HistoryEntry] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        data["history"] = [entry.as_dict() for entry in self.history]
        return data


@dataclass(slots=True)
class DeletedListing:
    """A listing removed from the listing service.

    ``listing_updated`` is the timestamp of the last update before deletion,
    which is what the date window of the query is matched against.
    """

    mls_number: str
    board_id: Optional[int] = None
    resource: Optional[str] = None
    address: Optional[Address] = None
    listing_updated: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        data["mlsNumber"] = self.mls_number
        if self.board_id is not None:
            data["boardId"] = self.board_id
        if self.resource is not None:
            data["resource"] = self.resource
        if self.address is not None:
            data["address"] = self.address.as_dict()
        if self.listing_updated is not None:
            timestamps = dict(data.get("timestamps") or {})
            timestamps["listingUpdated"] = self.listing_updated
            data["timestamps"] = timestamps
        return data


@dataclass(slots=True)
class DeletedListings:
    listings: List[DeletedListing] = field(default_factory=list)
    pagination: Pagination = field(default_factory=Pagination)
    extra: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        data.update(self.pagination.as_dict())
        data["listings"] = [listing.as_dict() for listing in self.listings]
        return data


@dataclass(frozen=True, slots=True)
class ApiErrorEnvelope:
    """Structured error reported by the API in a 4xx body."""

    message: str
    code: int | str
