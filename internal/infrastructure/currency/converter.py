"""
Display-to-base currency conversion for price filters.
"""
from decimal import Decimal

from internal.domain.errors import InvalidFilterValueError
from internal.domain.value_objects import parse_decimal


# Precision of the price index columns
PRICE_QUANTUM = Decimal("0.0001")


class FixedRatePriceConverter:
    """
    Converts with a single configured exchange rate.

    ``rate`` is the number of display-currency units per base unit, so a
    display price is divided by it.
    """

    def __init__(self, rate: Decimal = Decimal("1")) -> None:
        """
        Initialize the converter.

        Args:
            rate: Display units per base unit.

        Raises:
            ValueError: If the rate is not positive.
        """
        if rate <= 0:
            raise ValueError("currency rate must be positive")
        self._rate = rate

    def to_base(self, raw_price: str) -> Decimal:
        """
        Convert a display price to the base currency.

        Args:
            raw_price: Price token from the request.

        Returns:
            Base-currency amount rounded to the index precision.

        Raises:
            InvalidFilterValueError: If the token is not a number.
        """
        amount = parse_decimal("price", str(raw_price))
        if amount < 0:
            raise InvalidFilterValueError("price", raw_price, "must not be negative")
        return (amount / self._rate).quantize(PRICE_QUANTUM)
