"""
Metrics package.
"""
from .prometheus import (
    ATTRIBUTE_CACHE_LOOKUPS,
    CATALOG_EMPTY_RESULTS,
    CATALOG_QUERY_DURATION,
    HTTP_REQUEST_DURATION,
    HTTP_REQUESTS_TOTAL,
    SEARCH_DURATION,
    SEARCH_REQUESTS,
)

__all__ = [
    "ATTRIBUTE_CACHE_LOOKUPS",
    "CATALOG_EMPTY_RESULTS",
    "CATALOG_QUERY_DURATION",
    "HTTP_REQUEST_DURATION",
    "HTTP_REQUESTS_TOTAL",
    "SEARCH_DURATION",
    "SEARCH_REQUESTS",
]
