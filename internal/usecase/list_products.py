"""
List Products Use Case.

Faceted catalog listing: filters, sorting and pagination over the flat
product projection.
"""
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from internal.domain.filters import FilterSpec
from internal.domain.product import Page
from internal.domain.value_objects import CatalogContext
from internal.infrastructure.postgres.paginator import (
    PaginationExecutor,
    resolve_page,
    resolve_per_page,
)
from internal.infrastructure.postgres.plan_builder import QueryPlanBuilder
from pkg.logger.logger import get_logger


logger = get_logger(__name__)


@dataclass
class ListProductsInput:
    """Input for ListProductsUseCase."""

    context: CatalogContext
    params: Mapping[str, str] = field(default_factory=dict)
    category_ids: frozenset[int] = frozenset()


class ListProductsUseCase:
    """
    Use case for the storefront product listing.

    All parameters are validated while the plan is built, before the
    count query runs.
    """

    def __init__(
        self,
        builder: QueryPlanBuilder,
        executor: PaginationExecutor,
        default_sort: Optional[str] = None,
        page_sizes: Sequence[int] = (),
    ) -> None:
        """
        Initialize the use case.

        Args:
            builder: Query plan builder.
            executor: Two-phase plan executor.
            default_sort: Configured ``"<key>-<direction>"`` sort.
            page_sizes: Configured page sizes, the first one is the default.
        """
        self._builder = builder
        self._executor = executor
        self._default_sort = default_sort
        self._page_sizes = tuple(page_sizes)

    async def execute(self, input_data: ListProductsInput) -> Page:
        """
        Execute the listing.

        Args:
            input_data: Request parameters, category scope and context.

        Returns:
            One page of flat rows with the total count.

        Raises:
            InvalidFilterValueError: If a parameter cannot be parsed.
        """
        params = input_data.params
        spec = FilterSpec.from_params(
            params,
            category_ids=input_data.category_ids,
            default_sort=self._default_sort,
            page=resolve_page(params.get("page")),
            per_page=resolve_per_page(params.get("limit"), self._page_sizes),
        )

        logger.info(
            "Listing products",
            channel=input_data.context.channel,
            locale=input_data.context.locale,
            categories=sorted(spec.category_ids),
            page=spec.page,
            per_page=spec.per_page,
        )

        plan = await self._builder.build(spec, input_data.context)
        result = await self._executor.execute(plan, page=spec.page, per_page=spec.per_page)

        logger.info(
            "Products listed",
            total=result.total,
            returned=len(result.items),
        )

        return result
