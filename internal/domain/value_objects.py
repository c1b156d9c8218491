"""
Value Objects for the catalog domain.

Value objects are immutable and defined by their attributes.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from .errors import DomainValidationError, InvalidFilterValueError


DEFAULT_SORT = "name-desc"


@dataclass(frozen=True)
class CatalogContext:
    """
    Storefront scope of a single request.

    Attributes:
        channel: Channel code the storefront is serving.
        locale: Locale code of the request.
        customer_group_id: Customer group used to pick price index rows.
    """
    channel: str
    locale: str
    customer_group_id: int

    def __post_init__(self) -> None:
        """Validate context constraints."""
        if not self.channel:
            raise DomainValidationError("channel is required")
        if not self.locale:
            raise DomainValidationError("locale is required")
        if self.customer_group_id <= 0:
            raise DomainValidationError("customer_group_id must be positive")


def parse_decimal(parameter: str, token: str) -> Decimal:
    """
    Parse a numeric filter token.

    Raises:
        InvalidFilterValueError: If the token is not a finite number.
    """
    try:
        value = Decimal(token.strip())
    except (InvalidOperation, AttributeError):
        raise InvalidFilterValueError(parameter, token, "not a number")
    if not value.is_finite():
        raise InvalidFilterValueError(parameter, token, "not a finite number")
    return value


@dataclass(frozen=True)
class PriceRange:
    """
    Inclusive price interval in the storefront's display currency.

    Attributes:
        lower: Lower bound, inclusive. None when open.
        upper: Upper bound, inclusive. None when open.
    """
    lower: Optional[Decimal]
    upper: Optional[Decimal]

    @classmethod
    def parse(cls, parameter: str, raw: Optional[str]) -> Optional["PriceRange"]:
        """
        Parse a ``"<from>,<to>"`` range.

        The first and the last comma-separated tokens are the bounds, so a
        single value is a degenerate range. A blank bound leaves that side
        open (``"10,"``, ``",20"``). An empty value, or two blank bounds,
        means no range.

        Args:
            parameter: Request parameter the value came from.
            raw: Raw parameter value.

        Returns:
            PriceRange, or None when no bound is given.

        Raises:
            InvalidFilterValueError: If a bound is not numeric.
        """
        if raw is None or not raw.strip():
            return None
        tokens = raw.split(",")
        lower, upper = tokens[0].strip(), tokens[-1].strip()
        if not lower and not upper:
            return None
        return cls(
            lower=parse_decimal(parameter, lower) if lower else None,
            upper=parse_decimal(parameter, upper) if upper else None,
        )


class SortDirection(str, Enum):
    """SQL ordering direction."""

    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def parse(
        cls,
        token: Optional[str],
        default: Optional["SortDirection"] = None,
    ) -> "SortDirection":
        """
        Normalize a direction token.

        Unrecognized tokens map to ``default`` (DESC when not given).
        """
        if token:
            normalized = token.strip().upper()
            if normalized in cls.__members__:
                return cls[normalized]
        return default if default is not None else cls.DESC


@dataclass(frozen=True)
class SortSpec:
    """
    Requested ordering.

    Attributes:
        key: Attribute code (or any other key, which falls back to creation time).
        direction: Ordering direction.
    """
    key: str
    direction: SortDirection

    @classmethod
    def from_config(cls, configured: Optional[str]) -> "SortSpec":
        """
        Parse a configured ``"<key>-<direction>"`` default.

        Falls back to ``name-desc`` when nothing is configured.
        """
        parts = (configured or DEFAULT_SORT).strip().split("-")
        direction = SortDirection.parse(parts[-1]) if len(parts) > 1 else SortDirection.DESC
        return cls(key=parts[0], direction=direction)

    @classmethod
    def resolve(
        cls,
        sort: Optional[str],
        order: Optional[str],
        configured: Optional[str] = None,
    ) -> "SortSpec":
        """
        Combine request ``sort``/``order`` with the configured default.

        Each missing half is taken from the default.
        """
        default = cls.from_config(configured)
        return cls(
            key=sort.strip() if sort and sort.strip() else default.key,
            direction=SortDirection.parse(order, default=default.direction),
        )
