"""
Attribute facet predicates.

``product_attribute_values`` holds one row per (product, attribute), so no
single row can satisfy two attributes at once. Per-attribute predicates are
therefore ORed at row level and the conjunction is recovered by counting:
a product family matches only when the number of distinct attributes its
rows matched equals the number of requested attributes.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Optional, Sequence, Union

from internal.domain.attribute import AttributeDefinition, AttributeKind
from internal.domain.errors import InvalidFilterValueError
from internal.domain.value_objects import PriceRange
from internal.infrastructure.postgres.query_plan import (
    ATTRIBUTE_VALUES,
    FLAT,
    ROOT_ID,
    QueryPlan,
    inclusive_range,
)
from internal.domain.ports import PriceConverter


@dataclass(frozen=True)
class RangePredicate:
    """Inclusive range on an attribute's value column; a None bound is open."""

    attribute: AttributeDefinition
    lower: Optional[Decimal]
    upper: Optional[Decimal]

    def to_sql(self, bind: Callable[[Any], str]) -> str:
        column = f"{ATTRIBUTE_VALUES}.{self.attribute.column_name}"
        return (
            f"({ATTRIBUTE_VALUES}.attribute_id = {bind(self.attribute.id)}"
            f" AND {inclusive_range(column, self.lower, self.upper, bind)})"
        )


@dataclass(frozen=True)
class SetPredicate:
    """Membership of an attribute's value column in a set of tokens."""

    attribute: AttributeDefinition
    values: tuple

    def to_sql(self, bind: Callable[[Any], str]) -> str:
        column = f"{ATTRIBUTE_VALUES}.{self.attribute.column_name}"
        return (
            f"({ATTRIBUTE_VALUES}.attribute_id = {bind(self.attribute.id)}"
            f" AND {column} = ANY({bind(list(self.values))}))"
        )


AttributePredicate = Union[RangePredicate, SetPredicate]


def convert_bound(converter: PriceConverter, bound: Optional[Decimal]) -> Optional[Decimal]:
    """Base-currency value of a range bound; open bounds stay open."""
    if bound is None:
        return None
    return converter.to_base(str(bound))


def compile_range(
    attribute: AttributeDefinition,
    raw: str,
    converter: PriceConverter,
) -> RangePredicate:
    """Parse ``"<from>,<to>"`` and convert the given ends to the base currency."""
    price_range = PriceRange.parse(attribute.code, raw)
    if price_range is None:
        raise InvalidFilterValueError(attribute.code, raw, "expected a range")
    return RangePredicate(
        attribute=attribute,
        lower=convert_bound(converter, price_range.lower),
        upper=convert_bound(converter, price_range.upper),
    )


def compile_set(
    attribute: AttributeDefinition,
    raw: str,
    converter: PriceConverter,
) -> SetPredicate:
    """Parse a comma-separated token list, coerced to the column type."""
    tokens = [token.strip() for token in raw.split(",")]
    values = tuple(
        dict.fromkeys(attribute.coerce(token) for token in tokens if token)
    )
    return SetPredicate(attribute=attribute, values=values)


PREDICATE_COMPILERS: dict[AttributeKind, Callable[..., AttributePredicate]] = {
    AttributeKind.RANGE: compile_range,
    AttributeKind.SET: compile_set,
}


def compile_predicate(
    attribute: AttributeDefinition,
    raw: str,
    converter: PriceConverter,
) -> AttributePredicate:
    """Compile one request value into a predicate for its attribute kind."""
    return PREDICATE_COMPILERS[attribute.kind](attribute, raw, converter)


def matches_all_of(plan: QueryPlan, predicates: Sequence[AttributePredicate]) -> str:
    """
    Render the "family satisfies every predicate" condition.

    Values are joined through every row of the family (the product and its
    variants), so a configurable product matches when its variants jointly
    cover all requested attributes. The grouping runs in a derived table
    because the outer query groups by flat id.

    Args:
        plan: Plan the parameters are bound to.
        predicates: One predicate per requested attribute.

    Returns:
        WHERE fragment restricting the outer flat rows.
    """
    if not predicates:
        raise ValueError("matches_all_of needs at least one predicate")
    conditions = " OR ".join(predicate.to_sql(plan.bind) for predicate in predicates)
    return (
        f"{FLAT}.id IN (\n"
        f"    SELECT {ROOT_ID}\n"
        f"    FROM {FLAT} AS variants\n"
        f"    JOIN {ATTRIBUTE_VALUES} ON {ATTRIBUTE_VALUES}.product_id = variants.product_id\n"
        f"    WHERE {conditions}\n"
        f"    GROUP BY {ROOT_ID}\n"
        f"    HAVING COUNT(DISTINCT {ATTRIBUTE_VALUES}.attribute_id) = {plan.bind(len(predicates))}\n"
        f")"
    )
