"""
FastAPI Application Entry Point.

REST API server for the Storefront Catalog.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from internal.config.settings import get_settings
from internal.infrastructure.currency import FixedRatePriceConverter
from internal.infrastructure.postgres import (
    PaginationExecutor,
    PostgresAttributeCatalog,
    PostgresProductRepository,
    QueryPlanBuilder,
    SortResolver,
    create_pool,
)
from internal.infrastructure.redis import CachedAttributeCatalog, RedisCache
from internal.infrastructure.search import AlgoliaSearchStrategy, create_search_dispatcher
from internal.transport.http.middleware import MetricsMiddleware, request_id_middleware
from internal.transport.http.v1.handlers import router, set_dependencies
from internal.usecase import (
    ListProductsUseCase,
    SearchProductsUseCase,
    StorefrontProductsUseCase,
)
from pkg.logger.logger import setup_logging, get_logger


# Load environment variables
load_dotenv()

settings = get_settings()

# Setup logging
setup_logging(
    level=settings.log_level,
    json_format=settings.log_format == "json",
)

logger = get_logger(__name__)


# Global resources
db_pool = None
redis_cache = None
http_client = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown of resources.
    """
    global db_pool, redis_cache, http_client

    logger.info("Starting Storefront Catalog API...")

    # Initialize database pool
    try:
        db_pool = await create_pool(
            settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )
        logger.info("Database pool created")
    except Exception as e:
        logger.error("Failed to create database pool", error=str(e))
        raise

    # Attribute catalog, cached when Redis is reachable
    attribute_catalog = PostgresAttributeCatalog(db_pool)
    if settings.redis_url:
        try:
            redis_cache = RedisCache(
                redis_url=settings.redis_url,
                default_ttl=settings.attribute_cache_ttl,
            )
            await redis_cache.connect()
            attribute_catalog = CachedAttributeCatalog(attribute_catalog, redis_cache)
            logger.info("Redis cache connected")
        except Exception as e:
            logger.warning("Failed to connect to Redis, caching disabled", error=str(e))
            redis_cache = None
    else:
        logger.warning("REDIS_URL not set, attribute caching disabled")

    if settings.search_driver != "database":
        http_client = httpx.AsyncClient(timeout=settings.search_timeout_seconds)

    # Create repositories and services
    repository = PostgresProductRepository(db_pool)
    executor = PaginationExecutor(db_pool, snapshot_reads=settings.snapshot_reads)
    builder = QueryPlanBuilder(
        attribute_catalog=attribute_catalog,
        price_converter=FixedRatePriceConverter(settings.currency_rate),
        sort_resolver=SortResolver(attribute_catalog),
    )
    dispatcher = create_search_dispatcher(
        settings,
        executor=executor,
        loader=repository,
        http_client=http_client,
    )

    if isinstance(dispatcher.strategy, AlgoliaSearchStrategy):
        try:
            await dispatcher.strategy.configure_index()
        except httpx.HTTPError as e:
            logger.warning("Failed to configure Algolia index", error=str(e))

    # Set dependencies for handlers
    set_dependencies(
        list_use_case=ListProductsUseCase(
            builder=builder,
            executor=executor,
            default_sort=settings.catalog_sort_by,
            page_sizes=settings.get_page_sizes(),
        ),
        search_use_case=SearchProductsUseCase(dispatcher),
        storefront_use_case=StorefrontProductsUseCase(
            repository=repository,
            executor=executor,
            new_products_count=settings.new_products_count,
            featured_products_count=settings.featured_products_count,
        ),
    )

    logger.info(
        "Storefront Catalog API started successfully",
        search_driver=dispatcher.strategy.name,
    )

    yield

    # Shutdown
    logger.info("Shutting down Storefront Catalog API...")

    if http_client:
        await http_client.aclose()

    if redis_cache:
        await redis_cache.disconnect()

    if db_pool:
        await db_pool.close()

    logger.info("Storefront Catalog API shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Storefront Catalog API",
    description="Faceted product catalog queries for the storefront",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Metrics middleware
app.add_middleware(MetricsMiddleware)

# Request ID middleware
app.middleware("http")(request_id_middleware)


# Include routers
app.include_router(router)


# Root endpoint
@app.get("/")
async def root() -> dict:
    """Root endpoint with service information."""
    return {
        "service": "storefront-catalog",
        "version": "1.0.0",
        "status": "running",
    }


if __name__ == "__main__":
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
    )
