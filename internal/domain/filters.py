"""
Request-scoped catalog filter specification.
"""
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .errors import InvalidFilterValueError
from .value_objects import PriceRange, SortSpec


# Parameters with a fixed meaning; everything else is an attribute candidate
RESERVED_PARAMS = frozenset(
    (
        "price",
        "name",
        "status",
        "visible_individually",
        "search",
        "url_key",
        "sort",
        "order",
        "page",
        "limit",
    )
)

# Substring filters: request parameter -> product_flat column
TEXT_FILTER_COLUMNS: dict[str, str] = {
    "search": "name",
    "name": "name",
    "url_key": "url_key",
}


def parse_category_ids(raw: Optional[str]) -> frozenset[int]:
    """
    Parse a category id or a comma-separated id list.

    Raises:
        InvalidFilterValueError: If a token is not a positive integer.
    """
    if raw is None or not raw.strip():
        return frozenset()
    ids = set()
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        if not token.isdigit() or int(token) <= 0:
            raise InvalidFilterValueError("category", token, "not a category id")
        ids.add(int(token))
    return frozenset(ids)


@dataclass(frozen=True)
class FilterSpec:
    """
    Everything a catalog listing request asks for.

    Attributes:
        category_ids: Categories to restrict to (any of them matches).
        text_filters: Substring filters, keyed by request parameter.
        price_range: Range on the indexed minimal price.
        attribute_filters: Raw values of non-reserved parameters, keyed by
            parameter name. Only those naming filterable attributes are used.
        sort: Requested ordering.
        page: 1-based page number.
        per_page: Page size.
    """
    sort: SortSpec
    page: int = 1
    per_page: int = 9
    category_ids: frozenset[int] = field(default_factory=frozenset)
    text_filters: dict[str, str] = field(default_factory=dict)
    price_range: Optional[PriceRange] = None
    attribute_filters: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_params(
        cls,
        params: Mapping[str, str],
        category_ids: frozenset[int] = frozenset(),
        default_sort: Optional[str] = None,
        page: int = 1,
        per_page: int = 9,
    ) -> "FilterSpec":
        """
        Build a filter spec from query-string shaped parameters.

        Args:
            params: Request parameters.
            category_ids: Category scope supplied outside the parameters.
            default_sort: Configured ``"<key>-<direction>"`` default sort.
            page: Resolved page number.
            per_page: Resolved page size.

        Raises:
            InvalidFilterValueError: If the price range is not numeric.
        """
        text_filters = {
            key: params[key]
            for key in TEXT_FILTER_COLUMNS
            if params.get(key)
        }
        attribute_filters = {
            key: value
            for key, value in params.items()
            if key not in RESERVED_PARAMS and value is not None and value != ""
        }
        return cls(
            sort=SortSpec.resolve(
                params.get("sort"),
                params.get("order"),
                configured=default_sort,
            ),
            page=page,
            per_page=per_page,
            category_ids=category_ids,
            text_filters=text_filters,
            price_range=PriceRange.parse("price", params.get("price")),
            attribute_filters=attribute_filters,
        )
