"""
Prometheus metrics for the storefront catalog.
"""

from prometheus_client import Counter, Histogram

# HTTP
HTTP_REQUESTS_TOTAL = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code']
)

HTTP_REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Catalog queries
CATALOG_QUERY_DURATION = Histogram(
    'catalog_query_duration_seconds',
    'Catalog query duration in seconds',
    ['phase'],  # count, fetch
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

CATALOG_EMPTY_RESULTS = Counter(
    'catalog_empty_results_total',
    'Catalog listings whose count phase found no rows'
)

# Search
SEARCH_REQUESTS = Counter(
    'search_requests_total',
    'Search requests by backend',
    ['driver', 'status']  # status: success, error, fallback
)

SEARCH_DURATION = Histogram(
    'search_duration_seconds',
    'Search duration in seconds',
    ['driver'],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
)

# Attribute metadata cache
ATTRIBUTE_CACHE_LOOKUPS = Counter(
    'attribute_cache_lookups_total',
    'Attribute metadata cache lookups',
    ['result']  # hit, miss
)
