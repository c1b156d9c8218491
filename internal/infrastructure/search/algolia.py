"""
Algolia search backend.

Implements search over the Algolia REST API with Circuit Breaker
pattern for resilience.
"""
from typing import Any

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

INDEX_SETTINGS = {
    "attributesForFaceting": ["filterOnly(channel)", "filterOnly(locale)"],
    "numericAttributesForFiltering": ["status", "visible_individually"],
    "customRanking": ["desc(product_id)"],
}


class AlgoliaSearchStrategy:
    """
    Queries an Algolia index holding one record per (product, channel, locale).
    """

    name = "algolia"

    def __init__(
        self,
        client: httpx.AsyncClient,
        app_id: str,
        api_key: str,
        index: str,
        loader: FlatRowLoader,
    ) -> None:
        """
        Initialize the strategy.

        Args:
            client: Shared HTTP client.
            app_id: Algolia application id.
            api_key: Algolia API key.
            index: Index name.
            loader: Flat row source used to hydrate hits.
        """
        self._client = client
        self._index = index
        self._loader = loader
        self._base_url = f"https://{app_id}-dsn.algolia.net/1/indexes/{index}"
        self._headers = {
            "X-Algolia-Application-Id": app_id,
            "X-Algolia-API-Key": api_key,
        }

    async def configure_index(self) -> None:
        """Push facet and ranking settings to the index. Called once at startup."""
        response = await self._client.put(
            f"{self._base_url}/settings",
            json=INDEX_SETTINGS,
            headers=self._headers,
        )
        response.raise_for_status()
        logger.info("Algolia index configured", index=self._index)

    def build_query(self, term: str, context: CatalogContext, page: int) -> dict[str, Any]:
        """Request body for one page of results."""
        return {
            "query": "",
            "similarQuery": " ".join(search_tokens(term)),
            "facetFilters": [
                f"locale:{context.locale}",
                f"channel:{context.channel}",
            ],
            "numericFilters": ["status=1", "visible_individually=1"],
            "page": page - 1,
            "hitsPerPage": SEARCH_PAGE_SIZE,
        }

    @circuit(
        failure_threshold=FAILURE_THRESHOLD,
        recovery_timeout=RECOVERY_TIMEOUT,
    )
    async def _query(self, body: dict[str, Any]) -> dict[str, Any]:
        """
        POST a query to the index.

        Raises:
            httpx.HTTPError: On transport errors and non-2xx answers.
            CircuitBreakerError: If circuit is open due to failures.
        """
        response = await self._client.post(
            f"{self._base_url}/query",
            json=body,
            headers=self._headers,
        )
        response.raise_for_status()
        return response.json()

    async def search(self, term: str, context: CatalogContext, page: int = 1) -> Page:
        result = await self._query(self.build_query(term, context, page))

        try:
            product_ids = [int(hit["product_id"]) for hit in result["hits"]]
            total = int(result["nbHits"])
        except (KeyError, TypeError, ValueError) as e:
            raise SearchBackendError(f"Malformed Algolia response: {e}") from e

        logger.debug("Algolia search", term=term, hits=len(product_ids), total=total)
        return await hydrate_hits(self._loader, product_ids, total, context, page)
