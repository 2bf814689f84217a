"""HTTP transport for the Repliers API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

import requests
from requests.adapters import HTTPAdapter

from .constants import API_KEY_HEADER, DEFAULT_POOL_MAXSIZE, DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from .errors import TransportError
from .models import Credentials, EndpointRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RawResponse:
    """Status, body and headers of a completed HTTP exchange."""

    status_code: int
    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)
    path: Optional[str] = None


@dataclass(slots=True)
class HttpTransport:
    """Pooled HTTP session shared by every call of one client.

    Any status code counts as a completed exchange; judging it is the decoder's
    job.  Only failures to complete the exchange raise :class:`TransportError`.
    """

    timeout: float = DEFAULT_TIMEOUT
    pool_maxsize: int = DEFAULT_POOL_MAXSIZE
    user_agent: str = DEFAULT_USER_AGENT
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError("timeout must be greater than zero")
        if not self.user_agent.strip():
            self.user_agent = DEFAULT_USER_AGENT
        self._session = requests.Session()
        adapter = HTTPAdapter(pool_connections=1, pool_maxsize=self.pool_maxsize)
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)
        self._session.headers.update(
            {
                "User-Agent": self.user_agent,
                "Accept": "application/json",
            }
        )

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def send(self, request: EndpointRequest, credentials: Credentials) -> RawResponse:
        """Execute ``request`` and return the raw response."""

        url = request.url(credentials.base_url)
        headers = self._headers(request, credentials)
        data = None
        if request.body is not None:
            data = json.dumps(request.body).encode("utf-8")

        logger.debug("%s %s", request.method, url)
        try:
            response = self._session.request(
                request.method,
                url,
                data=data,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            raise TransportError(
                f"{request.method} {request.path} timed out after {self.timeout}s: {exc}",
                timed_out=True,
            ) from exc
        except requests.RequestException as exc:
            raise TransportError(f"{request.method} {request.path} failed: {exc}") from exc

        logger.debug("%s %s -> %s", request.method, url, response.status_code)
        return RawResponse(
            status_code=response.status_code,
            body=response.content or b"",
            headers=dict(response.headers),
            path=request.path,
        )

    def close(self) -> None:
        """Release pooled connections."""

        self._session.close()

    @property
    def session(self) -> requests.Session:
        """Expose the underlying session for advanced use cases."""

        return self._session

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _headers(self, request: EndpointRequest, credentials: Credentials) -> Dict[str, str]:
        headers = {API_KEY_HEADER: credentials.api_key}
        if request.body is not None:
            headers["Content-Type"] = "application/json"
        return headers
