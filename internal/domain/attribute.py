"""
Attribute metadata for the entity-attribute-value product schema.

Attributes are defined by store configuration, so the set of filterable
codes is only known at runtime. Each definition carries the physical
column of ``product_attribute_values`` that stores its values.
"""
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable

from .errors import DomainValidationError, InvalidFilterValueError
from .value_objects import parse_decimal


class AttributeType(str, Enum):
    """Attribute input types known to the catalog."""

    TEXT = "text"
    TEXTAREA = "textarea"
    PRICE = "price"
    BOOLEAN = "boolean"
    SELECT = "select"
    MULTISELECT = "multiselect"
    DATETIME = "datetime"
    DATE = "date"
    IMAGE = "image"
    FILE = "file"
    CHECKBOX = "checkbox"


class AttributeKind(str, Enum):
    """How a filter value is compared against stored values."""

    RANGE = "range"
    SET = "set"


TYPE_COLUMNS: dict[AttributeType, str] = {
    AttributeType.TEXT: "text_value",
    AttributeType.TEXTAREA: "text_value",
    AttributeType.PRICE: "float_value",
    AttributeType.BOOLEAN: "boolean_value",
    AttributeType.SELECT: "integer_value",
    AttributeType.MULTISELECT: "text_value",
    AttributeType.DATETIME: "datetime_value",
    AttributeType.DATE: "date_value",
    AttributeType.IMAGE: "text_value",
    AttributeType.FILE: "text_value",
    AttributeType.CHECKBOX: "text_value",
}

_TRUE_TOKENS = frozenset(("1", "true", "yes", "on"))
_FALSE_TOKENS = frozenset(("0", "false", "no", "off"))


def _to_bool(parameter: str, token: str) -> bool:
    lowered = token.strip().lower()
    if lowered in _TRUE_TOKENS:
        return True
    if lowered in _FALSE_TOKENS:
        return False
    raise InvalidFilterValueError(parameter, token, "not a boolean")


def _to_int(parameter: str, token: str) -> int:
    try:
        return int(token.strip())
    except ValueError:
        raise InvalidFilterValueError(parameter, token, "not an integer")


def _to_date(parameter: str, token: str) -> date:
    try:
        return date.fromisoformat(token.strip())
    except ValueError:
        raise InvalidFilterValueError(parameter, token, "not an ISO date")


def _to_datetime(parameter: str, token: str) -> datetime:
    try:
        return datetime.fromisoformat(token.strip())
    except ValueError:
        raise InvalidFilterValueError(parameter, token, "not an ISO datetime")


# Token coercion per value column, matching the column's SQL type
COLUMN_COERCERS: dict[str, Callable[[str, str], Any]] = {
    "text_value": lambda parameter, token: token,
    "integer_value": _to_int,
    "float_value": parse_decimal,
    "boolean_value": _to_bool,
    "date_value": _to_date,
    "datetime_value": _to_datetime,
}


@dataclass(frozen=True)
class AttributeDefinition:
    """
    Definition of a catalog attribute.

    Attributes:
        id: Attribute identifier.
        code: Unique attribute code, also used as the request parameter name.
        type: Attribute input type.
        column_name: Column of product_attribute_values holding the value.
        is_filterable: Whether storefront listings may filter on it.
    """
    id: int
    code: str
    type: AttributeType
    column_name: str
    is_filterable: bool = False

    def __post_init__(self) -> None:
        """Validate the column, it is interpolated into SQL."""
        if self.column_name not in COLUMN_COERCERS:
            raise DomainValidationError(
                f"Unsupported value column '{self.column_name}' for attribute '{self.code}'"
            )

    @classmethod
    def from_type(
        cls, id: int, code: str, type: str, is_filterable: bool = False
    ) -> "AttributeDefinition":
        """
        Build a definition, deriving the value column from the type.

        Raises:
            ValueError: If the type is unknown.
        """
        attribute_type = AttributeType(type)
        return cls(
            id=id,
            code=code,
            type=attribute_type,
            column_name=TYPE_COLUMNS[attribute_type],
            is_filterable=is_filterable,
        )

    @property
    def kind(self) -> AttributeKind:
        """Price attributes filter by range, everything else by set membership."""
        if self.type is AttributeType.PRICE:
            return AttributeKind.RANGE
        return AttributeKind.SET

    def coerce(self, token: str) -> Any:
        """Convert a raw filter token to the Python type of the value column."""
        return COLUMN_COERCERS[self.column_name](self.code, token)

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "code": self.code,
            "type": self.type.value,
            "column_name": self.column_name,
            "is_filterable": self.is_filterable,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AttributeDefinition":
        """Inverse of to_dict."""
        return cls(
            id=int(data["id"]),
            code=data["code"],
            type=AttributeType(data["type"]),
            column_name=data["column_name"],
            is_filterable=bool(data.get("is_filterable", False)),
        )
