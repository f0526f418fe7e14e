"""
HTTP source for a paginated message-search endpoint.

The endpoint is queried as ``GET <url>?q=<query>&offset=<n>&limit=<n>`` and
must answer with a JSON array of ``{"subject", "received_at"}`` objects, or
an object carrying that array under ``messages``. No retries: transport
failures and timeouts become :class:`NetworkError`, 5xx/429 responses
:class:`SourceUnavailableError`, other error statuses :class:`SourceError`.
"""

from __future__ import annotations

from typing import Any

import httpx

from feedrecon.core.errors import NetworkError, ParseError, SourceError, SourceUnavailableError
from feedrecon.core.models import Event
from feedrecon.framework.sources.file import parse_received_at
from feedrecon.framework.sources.protocol import (
    DEFAULT_MAX_PAGE_SIZE,
    BaseEventSource,
    SourceType,
)


class HttpEventSource(BaseEventSource):
    """Fetch pages of events from an HTTP search endpoint.

    Args:
        name: Source name.
        url: Search endpoint.
        timeout: Per-request timeout in seconds.
        headers: Extra request headers.
        client: Pre-built ``httpx.Client`` (tests pass one with a
            ``MockTransport``); when omitted one is created and owned.
    """

    def __init__(
        self,
        name: str,
        url: str,
        *,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        client: httpx.Client | None = None,
        max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
    ):
        super().__init__(name, SourceType.HTTP, max_page_size=max_page_size)
        self._url = url
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, headers=headers)

    @property
    def url(self) -> str:
        return self._url

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpEventSource:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _fetch_page(self, query: str, offset: int, limit: int) -> list[Event]:
        params = {"q": query, "offset": offset, "limit": limit}
        try:
            response = self._client.get(self._url, params=params)
        except httpx.TimeoutException as e:
            raise NetworkError(f"Timed out fetching {self._url}", cause=e).with_context(url=self._url) from e
        except httpx.TransportError as e:
            raise NetworkError(f"Could not reach {self._url}: {e}", cause=e).with_context(url=self._url) from e

        if response.status_code == 429 or response.status_code >= 500:
            raise SourceUnavailableError(
                f"Feed unavailable: HTTP {response.status_code}"
            ).with_context(url=self._url, http_status=response.status_code)
        if response.is_error:
            raise SourceError(
                f"Feed request rejected: HTTP {response.status_code}"
            ).with_context(url=self._url, http_status=response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise ParseError(f"Feed returned invalid JSON: {e}", cause=e).with_context(url=self._url) from e
        # servers may ignore ``limit``
        return [self._to_event(item) for item in self._messages(payload)[:limit]]

    def _messages(self, payload: Any) -> list[Any]:
        if isinstance(payload, dict):
            payload = payload.get("messages")
        if not isinstance(payload, list):
            raise ParseError("Feed response is not a list of messages").with_context(url=self._url)
        return payload

    def _to_event(self, item: Any) -> Event:
        if not isinstance(item, dict) or not isinstance(item.get("subject"), str):
            raise ParseError(f"Feed message without subject: {item!r}").with_context(url=self._url)
        try:
            received_at = parse_received_at(item.get("received_at"))
        except ValueError as e:
            raise ParseError(str(e), cause=e).with_context(url=self._url) from e
        return Event(subject=item["subject"], received_at=received_at)
