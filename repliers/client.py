"""HTTP client for the Repliers real-estate listings API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

from . import builders, parser
from .config import Settings, load_settings
from .constants import DEFAULT_BASE_URL, DEFAULT_POOL_MAXSIZE, DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from .models import (
    AddressHistory,
    AddressHistoryQuery,
    AiSearchQuery,
    AiSearchResult,
    Credentials,
    DeletedListings,
    DeletedListingsQuery,
    EndpointRequest,
    Listing,
    ListingPage,
    SearchFilters,
    SimilarListings,
    SimilarListingsQuery,
)
from .transport import HttpTransport, RawResponse

T = TypeVar("T")


@dataclass(slots=True)
class RepliersClient:
    """Client exposing one method per Repliers endpoint.

    Every method builds its request, sends it once and decodes the response.
    Invalid input raises :class:`~repliers.errors.ValidationError` before any
    network traffic; everything else surfaces as one of the other
    :mod:`repliers.errors` kinds.  Nothing is retried.

    The client may be shared between threads: the pooled session is the only
    state touched by more than one call.
    """

    api_key: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    pool_maxsize: int = DEFAULT_POOL_MAXSIZE
    user_agent: str = DEFAULT_USER_AGENT
    transport: Optional[HttpTransport] = field(default=None, repr=False)
    _credentials: Credentials = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._credentials = Credentials(api_key=self.api_key, base_url=self.base_url)
        self.base_url = self._credentials.base_url
        if self.transport is None:
            self.transport = HttpTransport(
                timeout=self.timeout,
                pool_maxsize=self.pool_maxsize,
                user_agent=self.user_agent,
            )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "RepliersClient":
        """Create a client from already loaded :class:`~repliers.config.Settings`."""

        return cls(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout,
            pool_maxsize=settings.pool_maxsize,
            **kwargs,
        )

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **kwargs) -> "RepliersClient":
        """Create a client from ``REPLIERS_*`` environment variables (and ``.env``)."""

        return cls.from_settings(load_settings(env_file), **kwargs)

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def search_listings(self, filters: Optional[SearchFilters] = None) -> ListingPage:
        """Search listings with structured filters (``POST /listings``)."""

        request = builders.build_search_request(filters or SearchFilters())
        return self._call(request, parser.decode_listing_page)

    def ai_search(
        self,
        query: AiSearchQuery | str,
        *,
        board_id: Optional[str] = None,
        nlp_id: Optional[str] = None,
    ) -> AiSearchResult:
        """Turn a natural-language prompt into a structured search (``POST /nlp``)."""

        if isinstance(query, str):
            query = AiSearchQuery(prompt=query, board_id=board_id, nlp_id=nlp_id)
        request = builders.build_ai_search_request(query)
        return self._call(request, parser.decode_ai_search)

    def get_listing(self, mls_number: str, board_id: Optional[str] = None) -> Listing:
        """Return a single listing (``GET /listings/{mlsNumber}``)."""

        request = builders.build_get_listing_request(mls_number, board_id)
        return self._call(request, parser.decode_listing)

    def get_similar_listings(self, query: SimilarListingsQuery | str) -> SimilarListings:
        """Return listings similar to one listing (``GET /listings/{mlsNumber}/similar``)."""

        if isinstance(query, str):
            query = SimilarListingsQuery(mls_number=query)
        request = builders.build_similar_listings_request(query)
        return self._call(request, parser.decode_similar_listings)

    def get_address_history(self, query: AddressHistoryQuery) -> AddressHistory:
        """Return every past listing of an address (``GET /listings/history``)."""

        request = builders.build_address_history_request(query)
        return self._call(request, parser.decode_address_history)

    def get_deleted_listings(self, query: Optional[DeletedListingsQuery] = None) -> DeletedListings:
        """Return listings deleted within a date window (``GET /listings/deleted``)."""

        request = builders.build_deleted_listings_request(query or DeletedListingsQuery())
        return self._call(request, parser.decode_deleted_listings)

    def close(self) -> None:
        """Release pooled connections held by the transport."""

        self.transport.close()

    def __enter__(self) -> "RepliersClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _call(self, request: EndpointRequest, decode: Callable[[RawResponse], T]) -> T:
        raw = self.transport.send(request, self._credentials)
        return decode(raw)
