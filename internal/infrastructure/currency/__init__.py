"""
Currency conversion package.
"""
from .converter import FixedRatePriceConverter

__all__ = ["FixedRatePriceConverter"]
