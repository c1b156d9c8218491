"""
Search Products Use Case.

Full-text search through the configured search backend.
"""
from dataclasses import dataclass

from internal.domain.product import Page
from internal.domain.value_objects import CatalogContext
from internal.infrastructure.search.dispatcher import SearchDispatcher
from pkg.logger.logger import get_logger


logger = get_logger(__name__)


@dataclass
class SearchProductsInput:
    """Input for SearchProductsUseCase."""

    term: str
    context: CatalogContext
    page: int = 1


class SearchProductsUseCase:
    """Use case for storefront product search."""

    def __init__(self, dispatcher: SearchDispatcher) -> None:
        """
        Initialize the use case.

        Args:
            dispatcher: Search dispatcher.
        """
        self._dispatcher = dispatcher

    async def execute(self, input_data: SearchProductsInput) -> Page:
        """
        Execute the search use case.

        Args:
            input_data: Search term, context and page.

        Returns:
            Page of flat rows.
        """
        logger.info(
            "Searching products",
            term=input_data.term,
            driver=self._dispatcher.strategy.name,
            page=input_data.page,
        )

        result = await self._dispatcher.search(
            input_data.term,
            input_data.context,
            input_data.page,
        )

        logger.info(
            "Search completed",
            term=input_data.term,
            total=result.total,
            returned=len(result.items),
        )

        return result
