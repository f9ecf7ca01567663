"""Open Library search passthrough.

The response body is relayed byte for byte; nothing here parses it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from domain.errors import UpstreamUnavailable, ValidationFailed

OPENLIBRARY_SEARCH_URL = "https://openlibrary.org/search.json"
USER_AGENT = "shelfmark/0.1 (personal catalog)"
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RelayedResponse:
    status_code: int
    content: bytes
    content_type: str = "application/json"


class SearchRelay:
    def __init__(
        self,
        base_url: str = OPENLIBRARY_SEARCH_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def relay(self, query: str | None) -> RelayedResponse:
        """Forward ``query`` upstream and return its status and raw body."""
        query = (query or "").strip()
        if not query:
            raise ValidationFailed("Missing query", field="query")

        try:
            resp = self.session.get(
                self.base_url,
                params={"q": query},
                headers={"User-Agent": USER_AGENT},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Search request to %s failed: %s", self.base_url, e)
            raise UpstreamUnavailable(f"Error requesting book search API: {e}") from e

        if not 200 <= resp.status_code < 300:
            logger.warning("Search upstream returned HTTP %d for %r", resp.status_code, query)
            raise UpstreamUnavailable(
                "Book search API returned an error",
                upstream_status=resp.status_code,
            )

        logger.debug("Relayed search %r: %d bytes", query, len(resp.content))
        return RelayedResponse(
            status_code=resp.status_code,
            content=resp.content,
            content_type=resp.headers.get("Content-Type", "application/json"),
        )
