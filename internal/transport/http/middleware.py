"""
HTTP Middleware for the Storefront Catalog.

Provides middleware components for request processing.
"""
import uuid

from starlette.requests import Request
from starlette.responses import Response

from pkg.logger.logger import set_request_id

from .metrics import MetricsMiddleware


REQUEST_ID_HEADER = "X-Request-ID"


async def request_id_middleware(request: Request, call_next) -> Response:
    """
    Add request ID to context for logging and tracing.
    """
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    set_request_id(request_id)

    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id

    return response


__all__ = [
    "MetricsMiddleware",
    "REQUEST_ID_HEADER",
    "request_id_middleware",
]
