"""
FastAPI HTTP Handlers for Storefront Catalog API v1.

Implements REST endpoints for catalog listing, search and product lookups.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Path, Query, Request, status
from fastapi.responses import Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from internal.config.settings import Settings, get_settings
from internal.domain.errors import DomainValidationError, ProductNotFoundError
from internal.domain.filters import parse_category_ids
from internal.domain.ports import resolve_context
from internal.domain.value_objects import CatalogContext
from internal.infrastructure.postgres.paginator import resolve_page
from internal.infrastructure.search.dispatcher import BACKEND_ERRORS
from internal.transport.http.context import HeaderContextResolver
from internal.transport.http.dto import (
    CategoryMaxPriceResponse,
    ErrorResponse,
    PaginatedResponse,
    ProductListItem,
    ProductListResponse,
    ProductResponse,
    SuperAttributesResponse,
)
from internal.usecase.list_products import ListProductsInput, ListProductsUseCase
from internal.usecase.search_products import SearchProductsInput, SearchProductsUseCase
from internal.usecase.storefront_products import StorefrontProductsUseCase
from pkg.logger.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(prefix="/api/v1", tags=["products"])


# Dependency injection container (simplified)
class Dependencies:
    """Container for handler dependencies."""

    list_use_case: Optional[ListProductsUseCase] = None
    search_use_case: Optional[SearchProductsUseCase] = None
    storefront_use_case: Optional[StorefrontProductsUseCase] = None


_deps = Dependencies()


def _not_initialized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Service not initialized",
    )


def get_list_use_case() -> ListProductsUseCase:
    """Get ListProductsUseCase instance."""
    if _deps.list_use_case is None:
        raise _not_initialized()
    return _deps.list_use_case


def get_search_use_case() -> SearchProductsUseCase:
    """Get SearchProductsUseCase instance."""
    if _deps.search_use_case is None:
        raise _not_initialized()
    return _deps.search_use_case


def get_storefront_use_case() -> StorefrontProductsUseCase:
    """Get StorefrontProductsUseCase instance."""
    if _deps.storefront_use_case is None:
        raise _not_initialized()
    return _deps.storefront_use_case


def set_dependencies(
    list_use_case: ListProductsUseCase,
    search_use_case: SearchProductsUseCase,
    storefront_use_case: StorefrontProductsUseCase,
) -> None:
    """
    Set handler dependencies.

    Called during application startup.
    """
    _deps.list_use_case = list_use_case
    _deps.search_use_case = search_use_case
    _deps.storefront_use_case = storefront_use_case


def get_catalog_context(
    x_channel: Optional[str] = Header(None, alias="X-Channel"),
    x_locale: Optional[str] = Header(None, alias="X-Locale"),
    x_customer_group: Optional[str] = Header(None, alias="X-Customer-Group"),
    settings: Settings = Depends(get_settings),
) -> CatalogContext:
    """Storefront scope of the request."""
    resolver = HeaderContextResolver(
        settings,
        channel=x_channel,
        locale=x_locale,
        customer_group=x_customer_group,
    )
    try:
        return resolve_context(resolver)
    except DomainValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )


async def _list(
    use_case: ListProductsUseCase,
    request: Request,
    context: CatalogContext,
    category_ids: frozenset = frozenset(),
) -> PaginatedResponse:
    try:
        result = await use_case.execute(
            ListProductsInput(
                context=context,
                params=dict(request.query_params),
                category_ids=category_ids,
            )
        )
    except DomainValidationError as e:
        logger.warning("Invalid listing parameters", error=e.message)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )

    return PaginatedResponse.from_page(result)


# Handlers
@router.get("/products/health")
async def health_check() -> dict:
    """
    Health check endpoint.

    Returns:
        Health status.
    """
    return {"status": "healthy", "service": "storefront-catalog"}


@router.get("/products/metrics")
async def metrics():
    """
    Prometheus metrics endpoint.

    Returns:
        Prometheus metrics in text format.
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


@router.get(
    "/products",
    response_model=PaginatedResponse,
    responses={
        200: {"description": "Product listing"},
        400: {"model": ErrorResponse, "description": "Invalid filter value"},
    },
)
async def list_products(
    request: Request,
    context: CatalogContext = Depends(get_catalog_context),
    use_case: ListProductsUseCase = Depends(get_list_use_case),
) -> PaginatedResponse:
    """
    List storefront products.

    Accepts ``search``, ``name``, ``url_key``, ``price``, ``sort``,
    ``order``, ``page`` and ``limit``; any other parameter naming a
    filterable attribute filters by that attribute.
    """
    return await _list(use_case, request, context)


@router.get(
    "/categories/{category_ids}/products",
    response_model=PaginatedResponse,
    responses={
        200: {"description": "Products in categories"},
        400: {"model": ErrorResponse, "description": "Invalid filter value"},
    },
)
async def get_category_products(
    request: Request,
    category_ids: str = Path(..., description="Category ID or comma-separated IDs"),
    context: CatalogContext = Depends(get_catalog_context),
    use_case: ListProductsUseCase = Depends(get_list_use_case),
) -> PaginatedResponse:
    """
    Get products in any of the given categories.

    This is equivalent to GET /products restricted to the categories.
    """
    try:
        ids = parse_category_ids(category_ids)
    except DomainValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )

    logger.info("Getting category products", category_ids=sorted(ids))
    return await _list(use_case, request, context, category_ids=ids)


@router.get(
    "/categories/{category_id}/max-price",
    response_model=CategoryMaxPriceResponse,
)
async def get_category_max_price(
    category_id: int = Path(..., ge=1, description="Category ID"),
    context: CatalogContext = Depends(get_catalog_context),
    use_case: StorefrontProductsUseCase = Depends(get_storefront_use_case),
) -> CategoryMaxPriceResponse:
    """Highest indexed price in a category for the request's customer group."""
    max_price = await use_case.get_category_max_price(category_id, context)
    return CategoryMaxPriceResponse(category_id=category_id, max_price=max_price)


@router.get(
    "/products/search",
    response_model=PaginatedResponse,
    responses={
        200: {"description": "Search results"},
        400: {"model": ErrorResponse, "description": "Invalid page"},
        503: {"model": ErrorResponse, "description": "Search backend unavailable"},
    },
)
async def search_products(
    term: str = Query("", description="Search term, words separated by underscores"),
    page: Optional[str] = Query(None, description="Page number"),
    context: CatalogContext = Depends(get_catalog_context),
    use_case: SearchProductsUseCase = Depends(get_search_use_case),
) -> PaginatedResponse:
    """
    Full-text search through the configured backend.

    Pages hold 16 products.
    """
    try:
        result = await use_case.execute(
            SearchProductsInput(term=term, context=context, page=resolve_page(page))
        )
    except DomainValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )
    except BACKEND_ERRORS as e:
        logger.error("Search unavailable", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Search backend unavailable",
        )

    return PaginatedResponse.from_page(result)


@router.get("/products/new", response_model=ProductListResponse)
async def get_new_products(
    count: Optional[int] = Query(None, ge=1, le=100, description="Number of products"),
    context: CatalogContext = Depends(get_catalog_context),
    use_case: StorefrontProductsUseCase = Depends(get_storefront_use_case),
) -> ProductListResponse:
    """Random selection of products flagged as new."""
    result = await use_case.get_new_products(context, count)
    return ProductListResponse(data=[ProductListItem(**row) for row in result.items])


@router.get("/products/featured", response_model=ProductListResponse)
async def get_featured_products(
    count: Optional[int] = Query(None, ge=1, le=100, description="Number of products"),
    context: CatalogContext = Depends(get_catalog_context),
    use_case: StorefrontProductsUseCase = Depends(get_storefront_use_case),
) -> ProductListResponse:
    """Random selection of products flagged as featured."""
    result = await use_case.get_featured_products(context, count)
    return ProductListResponse(data=[ProductListItem(**row) for row in result.items])


@router.get("/products/simple", response_model=ProductListResponse)
async def search_simple_products(
    term: str = Query(..., min_length=1, description="Part of the product name"),
    context: CatalogContext = Depends(get_catalog_context),
    use_case: StorefrontProductsUseCase = Depends(get_storefront_use_case),
) -> ProductListResponse:
    """In-stock simple products, used to pick grouped product members."""
    rows = await use_case.search_simple_products(term, context)
    return ProductListResponse(data=[ProductListItem(**row) for row in rows])


@router.get(
    "/products/slug/{url_key}",
    response_model=ProductResponse,
    responses={
        200: {"description": "Product found"},
        404: {"model": ErrorResponse, "description": "Product not found"},
    },
)
async def get_product_by_slug(
    url_key: str = Path(..., description="Product URL key"),
    context: CatalogContext = Depends(get_catalog_context),
    use_case: StorefrontProductsUseCase = Depends(get_storefront_use_case),
) -> ProductResponse:
    """Get a product by URL key."""
    try:
        row = await use_case.find_by_slug_or_fail(url_key, context)
    except ProductNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        )

    return ProductResponse(data=ProductListItem(**row))


@router.get(
    "/products/{product_id}/super-attributes",
    response_model=SuperAttributesResponse,
    responses={
        200: {"description": "Configurable attributes"},
        404: {"model": ErrorResponse, "description": "Product not found"},
    },
)
async def get_super_attributes(
    product_id: int = Path(..., ge=1, description="Product ID"),
    use_case: StorefrontProductsUseCase = Depends(get_storefront_use_case),
) -> SuperAttributesResponse:
    """Configurable attributes of a product, with their options."""
    try:
        attributes = await use_case.get_super_attributes(product_id)
    except ProductNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        )

    return SuperAttributesResponse(data=attributes)
