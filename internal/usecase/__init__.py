"""
Use case package for the storefront catalog.

Contains business logic and use cases.
"""
from .copy_product import CopyProductUseCase
from .list_products import ListProductsInput, ListProductsUseCase
from .search_products import SearchProductsInput, SearchProductsUseCase
from .storefront_products import StorefrontProductsUseCase

__all__ = [
    "CopyProductUseCase",
    "ListProductsInput",
    "ListProductsUseCase",
    "SearchProductsInput",
    "SearchProductsUseCase",
    "StorefrontProductsUseCase",
]
