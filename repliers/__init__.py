"""High level package exports for the Repliers API client."""

from .client import RepliersClient
from .config import Settings, load_settings
from .constants import DEFAULT_BASE_URL
from .errors import (
    ApiError,
    AuthenticationError,
    DecodeError,
    ErrorKind,
    NotFoundError,
    RepliersError,
    TransportError,
    ValidationError,
)
from .models import (
    Address,
    AddressHistory,
    AddressHistoryQuery,
    AiSearchQuery,
    AiSearchResult,
    Credentials,
    DeletedListing,
    DeletedListings,
    DeletedListingsQuery,
    HistoryEntry,
    Listing,
    ListingPage,
    ListingStatus,
    Pagination,
    SearchFilters,
    SimilarListings,
    SimilarListingsQuery,
)

__all__ = [
    "RepliersClient",
    "Settings",
    "load_settings",
    "DEFAULT_BASE_URL",
    "ApiError",
    "AuthenticationError",
    "DecodeError",
    "ErrorKind",
    "NotFoundError",
    "RepliersError",
    "TransportError",
    "ValidationError",
    "Address",
    "AddressHistory",
    "AddressHistoryQuery",
    "AiSearchQuery",
    "AiSearchResult",
    "Credentials",
    "DeletedListing",
    "DeletedListings",
    "DeletedListingsQuery",
    "HistoryEntry",
    "Listing",
    "ListingPage",
    "ListingStatus",
    "Pagination",
    "SearchFilters",
    "SimilarListings",
    "SimilarListingsQuery",
]
