"""
Search backends package.
"""
from .algolia import AlgoliaSearchStrategy
from .base import SEARCH_PAGE_SIZE, SearchBackendError, search_tokens
from .dispatcher import SearchDispatcher, create_search_dispatcher
from .elastic import ElasticSearchStrategy, escape_query_token
from .relational import DatabaseSearchStrategy

__all__ = [
    "AlgoliaSearchStrategy",
    "DatabaseSearchStrategy",
    "ElasticSearchStrategy",
    "SEARCH_PAGE_SIZE",
    "SearchBackendError",
    "SearchDispatcher",
    "create_search_dispatcher",
    "escape_query_token",
    "search_tokens",
]
