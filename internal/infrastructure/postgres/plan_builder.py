"""
Catalog query planner.

Turns a FilterSpec into a QueryPlan over the flat product projection,
joining the price index, category links and attribute values as needed.
"""
from internal.domain.attribute import AttributeDefinition
from internal.domain.filters import TEXT_FILTER_COLUMNS, FilterSpec
from internal.domain.ports import AttributeCatalog, PriceConverter
from internal.domain.value_objects import CatalogContext
from internal.infrastructure.postgres.attribute_filters import (
    compile_predicate,
    convert_bound,
    matches_all_of,
)
from internal.infrastructure.postgres.query_plan import (
    CATEGORY_LINKS,
    FLAT,
    PRICE_INDEX,
    QueryPlan,
    contains_pattern,
    inclusive_range,
    storefront_plan,
)
from internal.infrastructure.postgres.sort_resolver import SortResolver
from pkg.logger.logger import get_logger


logger = get_logger(__name__)


class QueryPlanBuilder:
    """
    Builds catalog listing plans.

    Every parameter is parsed before the plan is returned, so invalid
    values surface before any product query runs.
    """

    def __init__(
        self,
        attribute_catalog: AttributeCatalog,
        price_converter: PriceConverter,
        sort_resolver: SortResolver,
    ) -> None:
        """
        Initialize the builder.

        Args:
            attribute_catalog: Attribute metadata lookups.
            price_converter: Display-to-base currency conversion.
            sort_resolver: Sort key resolution.
        """
        self._attribute_catalog = attribute_catalog
        self._price_converter = price_converter
        self._sort_resolver = sort_resolver

    async def build(self, spec: FilterSpec, context: CatalogContext) -> QueryPlan:
        """
        Compose the plan for a listing request.

        Args:
            spec: Parsed request filters.
            context: Storefront scope.

        Returns:
            QueryPlan bound to no page.

        Raises:
            InvalidFilterValueError: If a price or attribute value cannot be parsed.
        """
        plan = storefront_plan(context)

        # Aliased, product_flat carries its own min_price and max_price columns
        plan.select.extend(
            [
                f"{PRICE_INDEX}.min_price AS indexed_min_price",
                f"{PRICE_INDEX}.max_price AS indexed_max_price",
            ]
        )
        plan.joins.append(
            f"LEFT JOIN {PRICE_INDEX} ON {PRICE_INDEX}.product_id = {FLAT}.product_id"
            f" AND {PRICE_INDEX}.customer_group_id = {plan.bind(context.customer_group_id)}"
        )

        if spec.category_ids:
            plan.joins.append(
                f"JOIN {CATEGORY_LINKS} ON {CATEGORY_LINKS}.product_id = {FLAT}.product_id"
            )
            plan.where.append(
                f"{CATEGORY_LINKS}.category_id = ANY({plan.bind(sorted(spec.category_ids))})"
            )

        for parameter, term in spec.text_filters.items():
            column = TEXT_FILTER_COLUMNS[parameter]
            plan.where.append(f"{FLAT}.{column} ILIKE {plan.bind(contains_pattern(term))}")

        if spec.price_range is not None:
            plan.where.append(
                inclusive_range(
                    f"{PRICE_INDEX}.min_price",
                    convert_bound(self._price_converter, spec.price_range.lower),
                    convert_bound(self._price_converter, spec.price_range.upper),
                    plan.bind,
                )
            )

        attributes = await self._filterable_attributes(spec)
        if attributes:
            predicates = [
                compile_predicate(
                    attribute,
                    spec.attribute_filters[attribute.code],
                    self._price_converter,
                )
                for attribute in attributes
            ]
            plan.where.append(matches_all_of(plan, predicates))

        order = await self._sort_resolver.resolve(spec.sort.key, spec.sort.direction)
        plan.order_by = order.to_sql()

        # Collapses category fan-out; one price row per (product, group)
        plan.group_by = [
            f"{FLAT}.id",
            f"{PRICE_INDEX}.min_price",
            f"{PRICE_INDEX}.max_price",
        ]

        logger.debug(
            "Catalog plan built",
            categories=sorted(spec.category_ids),
            text_filters=sorted(spec.text_filters),
            attributes=[attribute.code for attribute in attributes],
            sort=order.column,
        )

        return plan

    async def _filterable_attributes(self, spec: FilterSpec) -> list[AttributeDefinition]:
        """Request parameters that name filterable attributes, ordered by code."""
        if not spec.attribute_filters:
            return []
        definitions = await self._attribute_catalog.filterable_attributes(
            sorted(spec.attribute_filters)
        )
        by_code = {
            definition.code: definition
            for definition in definitions
            if definition.code in spec.attribute_filters
        }
        return [by_code[code] for code in sorted(by_code)]
