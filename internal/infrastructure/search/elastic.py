"""
Elasticsearch search backend.
"""
import re
from typing import Any, Optional

import httpx
from circuitbreaker import circuit

from internal.domain.product import Page
from internal.domain.value_objects import CatalogContext
from internal.infrastructure.search.base import (
    SEARCH_PAGE_SIZE,
    FlatRowLoader,
    SearchBackendError,
    hydrate_hits,
    search_tokens,
)
from pkg.logger.logger import get_logger


logger = get_logger(__name__)


# Circuit Breaker configuration
FAILURE_THRESHOLD = 5
RECOVERY_TIMEOUT = 30

# Lucene query_string operators; < and > cannot be escaped at all
_RESERVED_RE = re.compile(r'([+\-=&|!(){}\[\]^"~*?:\\/])')
_UNESCAPABLE_RE = re.compile(r"[<>]")


def escape_query_token(token: str) -> str:
    """Make a token match literally inside a ``query_string`` query."""
    return _RESERVED_RE.sub(r"\\\1", _UNESCAPABLE_RE.sub("", token))


class ElasticSearchStrategy:
    """
    Queries an Elasticsearch index holding one document per (product, channel, locale).
    """

    name = "elastic"

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        index: str,
        loader: FlatRowLoader,
        api_key: Optional[str] = None,
    ) -> None:
        """
        Initialize the strategy.

        Args:
            client: Shared HTTP client.
            url: Elasticsearch base URL.
            index: Index name.
            loader: Flat row source used to hydrate hits.
            api_key: Optional API key.
        """
        self._client = client
        self._search_url = f"{url.rstrip('/')}/{index}/_search"
        self._loader = loader
        self._headers = {"Authorization": f"ApiKey {api_key}"} if api_key else {}

    def build_query(self, term: str, context: CatalogContext, page: int) -> dict[str, Any]:
        """Request body for one page of results."""
        tokens = [escape_query_token(token) for token in search_tokens(term)]
        tokens = [token for token in tokens if token]
        must = (
            {"query_string": {"query": " OR ".join(tokens)}}
            if tokens
            else {"match_all": {}}
        )
        return {
            "from": (page - 1) * SEARCH_PAGE_SIZE,
            "size": SEARCH_PAGE_SIZE,
            "track_total_hits": True,
            "sort": [{"product_id": {"order": "desc"}}],
            "query": {
                "bool": {
                    "must": [must],
                    "filter": [
                        {"term": {"status": 1}},
                        {"term": {"visible_individually": 1}},
                        {"term": {"channel": context.channel}},
                        {"term": {"locale": context.locale}},
                    ],
                }
            },
        }

    @circuit(
        failure_threshold=FAILURE_THRESHOLD,
        recovery_timeout=RECOVERY_TIMEOUT,
    )
    async def _query(self, body: dict[str, Any]) -> dict[str, Any]:
        """
        POST a search request.

        Raises:
            httpx.HTTPError: On transport errors and non-2xx answers.
            CircuitBreakerError: If circuit is open due to failures.
        """
        response = await self._client.post(
            self._search_url,
            json=body,
            headers=self._headers,
        )
        response.raise_for_status()
        return response.json()

    async def search(self, term: str, context: CatalogContext, page: int = 1) -> Page:
        result = await self._query(self.build_query(term, context, page))

        try:
            hits = result["hits"]
            product_ids = [
                int(hit["_source"]["product_id"]) for hit in hits["hits"]
            ]
            total = int(hits["total"]["value"])
        except (KeyError, TypeError, ValueError) as e:
            raise SearchBackendError(f"Malformed Elasticsearch response: {e}") from e

        logger.debug("Elasticsearch search", term=term, hits=len(product_ids), total=total)
        return await hydrate_hits(self._loader, product_ids, total, context, page)
