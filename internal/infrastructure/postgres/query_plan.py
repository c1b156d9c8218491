"""
Composable catalog query descriptor.

A QueryPlan collects SQL fragments and their positional parameters while
the filters of a request are applied, and renders two statements from the
same body: the count over distinct flat ids and the windowed row fetch.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from internal.domain.value_objects import CatalogContext


FLAT = "product_flat"
PRICE_INDEX = "product_price_indices"
ATTRIBUTE_VALUES = "product_attribute_values"
CATEGORY_LINKS = "product_categories"

# Family key: a variant row resolves to its parent's flat id
ROOT_ID = "COALESCE(variants.parent_id, variants.id)"


@dataclass
class QueryPlan:
    """
    Re-executable query bound to no particular page.

    Placeholders are numbered in bind order, so fragments may be added in
    any order as long as they bind through the same plan.
    """
    select: list[str] = field(default_factory=lambda: [f"{FLAT}.*"])
    joins: list[str] = field(default_factory=list)
    where: list[str] = field(default_factory=list)
    group_by: list[str] = field(default_factory=list)
    having: list[str] = field(default_factory=list)
    order_by: list[str] = field(default_factory=list)
    params: list[Any] = field(default_factory=list)
    id_column: str = f"{FLAT}.id"

    def bind(self, value: Any) -> str:
        """Register a parameter and return its placeholder."""
        self.params.append(value)
        return f"${len(self.params)}"

    def _body(self) -> str:
        # Shared by the count and the fetch statements
        parts = [f"FROM {FLAT}"]
        parts.extend(self.joins)
        if self.where:
            parts.append("WHERE " + " AND ".join(self.where))
        if self.group_by:
            parts.append("GROUP BY " + ", ".join(self.group_by))
        if self.having:
            parts.append("HAVING " + " AND ".join(self.having))
        return "\n".join(parts)

    def count_query(self) -> tuple[str, list[Any]]:
        """
        Render the count statement.

        Ordering is never part of the count.

        Returns:
            Tuple of (SQL, parameters).
        """
        sql = (
            f"SELECT COUNT(*) AS aggregate FROM (\n"
            f"SELECT {self.id_column}\n{self._body()}\n"
            f") AS c"
        )
        return sql, list(self.params)

    def page_query(self, limit: int, offset: int) -> tuple[str, list[Any]]:
        """
        Render the row fetch for one window.

        Args:
            limit: Page size.
            offset: Number of rows to skip.

        Returns:
            Tuple of (SQL, parameters).
        """
        params = list(self.params)
        params.extend([limit, offset])
        sql = f"SELECT {', '.join(self.select)}\n{self._body()}"
        if self.order_by:
            sql += "\nORDER BY " + ", ".join(self.order_by)
        sql += f"\nLIMIT ${len(params) - 1} OFFSET ${len(params)}"
        return sql, params


def storefront_plan(context: CatalogContext) -> QueryPlan:
    """
    Start a plan over flat rows a storefront may show.

    Enabled, individually visible rows with a url key, in the context's
    channel and locale.
    """
    plan = QueryPlan()
    plan.where.extend(
        [
            f"{FLAT}.channel = {plan.bind(context.channel)}",
            f"{FLAT}.locale = {plan.bind(context.locale)}",
            f"{FLAT}.status = TRUE",
            f"{FLAT}.visible_individually = TRUE",
            f"{FLAT}.url_key IS NOT NULL",
        ]
    )
    return plan


HIGHLIGHT_FLAGS = frozenset(("new", "featured"))


def highlighted_plan(context: CatalogContext, flag: str) -> QueryPlan:
    """Storefront rows carrying the ``new`` or ``featured`` flag, in random order."""
    if flag not in HIGHLIGHT_FLAGS:
        raise ValueError(f"Unknown highlight flag '{flag}'")
    plan = storefront_plan(context)
    plan.where.append(f"{FLAT}.{flag} = TRUE")
    plan.order_by = ["RANDOM()"]
    return plan


def inclusive_range(
    column: str,
    lower: Optional[Any],
    upper: Optional[Any],
    bind: Callable[[Any], str],
) -> str:
    """
    Render ``column`` within ``[lower, upper]``; a None bound is open.

    Raises:
        ValueError: If both bounds are open.
    """
    if lower is not None and upper is not None:
        return f"{column} BETWEEN {bind(lower)} AND {bind(upper)}"
    if lower is not None:
        return f"{column} >= {bind(lower)}"
    if upper is not None:
        return f"{column} <= {bind(upper)}"
    raise ValueError("inclusive_range needs at least one bound")


def contains_pattern(term: str) -> str:
    """ILIKE pattern matching ``term`` as a literal substring."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
