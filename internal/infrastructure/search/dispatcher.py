"""
Search strategy dispatch.

The backend is chosen once at startup. External backends degrade to the
database strategy when they fail.
"""
from typing import Optional

import httpx
from circuitbreaker import CircuitBreakerError

from internal.config.settings import Settings
from internal.domain.ports import SearchStrategy
from internal.domain.product import Page
from internal.domain.value_objects import CatalogContext
from internal.infrastructure.metrics import SEARCH_DURATION, SEARCH_REQUESTS
from internal.infrastructure.postgres.paginator import PaginationExecutor
from internal.infrastructure.search.algolia import AlgoliaSearchStrategy
from internal.infrastructure.search.base import FlatRowLoader, SearchBackendError
from internal.infrastructure.search.elastic import ElasticSearchStrategy
from internal.infrastructure.search.relational import DatabaseSearchStrategy
from pkg.logger.logger import get_logger


logger = get_logger(__name__)


# Failures of a backend that the database strategy can stand in for
BACKEND_ERRORS = (httpx.HTTPError, CircuitBreakerError, SearchBackendError)


class SearchDispatcher:
    """
    Runs searches on the configured strategy with graceful degradation.
    """

    def __init__(
        self,
        strategy: SearchStrategy,
        fallback: Optional[SearchStrategy] = None,
        fallback_on_error: bool = True,
    ) -> None:
        """
        Initialize the dispatcher.

        Args:
            strategy: Configured search backend.
            fallback: Strategy answering when the backend fails.
            fallback_on_error: Whether to use the fallback at all.
        """
        self._strategy = strategy
        self._fallback = fallback if fallback is not strategy else None
        self._fallback_on_error = fallback_on_error

    @property
    def strategy(self) -> SearchStrategy:
        return self._strategy

    async def search(self, term: str, context: CatalogContext, page: int = 1) -> Page:
        """
        Search the catalog.

        Args:
            term: Search term, words separated by underscores.
            context: Storefront scope.
            page: 1-based page number.

        Returns:
            Page of flat rows.

        Raises:
            httpx.HTTPError: If the backend failed and no fallback applies.
        """
        driver = self._strategy.name
        try:
            with SEARCH_DURATION.labels(driver=driver).time():
                result = await self._strategy.search(term, context, page)
        except BACKEND_ERRORS as e:
            SEARCH_REQUESTS.labels(driver=driver, status="error").inc()
            if self._fallback is None or not self._fallback_on_error:
                logger.error("Search failed", driver=driver, error=str(e))
                raise

            logger.warning(
                "Search fallback: backend failed",
                driver=driver,
                fallback=self._fallback.name,
                error=str(e),
            )
            with SEARCH_DURATION.labels(driver=self._fallback.name).time():
                result = await self._fallback.search(term, context, page)
            SEARCH_REQUESTS.labels(driver=self._fallback.name, status="fallback").inc()
            return result

        SEARCH_REQUESTS.labels(driver=driver, status="success").inc()
        return result


def create_search_dispatcher(
    settings: Settings,
    executor: PaginationExecutor,
    loader: FlatRowLoader,
    http_client: Optional[httpx.AsyncClient] = None,
) -> SearchDispatcher:
    """
    Build the dispatcher for the configured ``search_driver``.

    Args:
        settings: Application settings.
        executor: Executor for the database strategy.
        loader: Flat row source hydrating external hits.
        http_client: Client for external backends.

    Returns:
        SearchDispatcher.

    Raises:
        ValueError: If an external driver is configured without an HTTP client.
    """
    database = DatabaseSearchStrategy(executor)

    if settings.search_driver == "database":
        return SearchDispatcher(database)

    if http_client is None:
        raise ValueError(f"search driver '{settings.search_driver}' needs an HTTP client")

    if settings.search_driver == "algolia":
        strategy: SearchStrategy = AlgoliaSearchStrategy(
            client=http_client,
            app_id=settings.algolia_app_id,
            api_key=settings.algolia_api_key,
            index=settings.algolia_index,
            loader=loader,
        )
    else:
        strategy = ElasticSearchStrategy(
            client=http_client,
            url=settings.elastic_url,
            index=settings.elastic_index,
            loader=loader,
            api_key=settings.elastic_api_key,
        )

    logger.info("Search driver selected", driver=strategy.name)
    return SearchDispatcher(
        strategy,
        fallback=database,
        fallback_on_error=settings.search_fallback_on_error,
    )
