"""
Domain package for the storefront catalog.

Contains domain entities, value objects, and domain errors.
"""
from .attribute import AttributeDefinition, AttributeKind, AttributeType
from .errors import (
    ConflictingStateError,
    DomainError,
    DomainValidationError,
    InvalidFilterValueError,
    ProductNotFoundError,
    UnsupportedProductTypeError,
)
from .filters import RESERVED_PARAMS, FilterSpec, parse_category_ids
from .product import Page, Product
from .value_objects import CatalogContext, PriceRange, SortDirection, SortSpec

__all__ = [
    "AttributeDefinition",
    "AttributeKind",
    "AttributeType",
    "CatalogContext",
    "ConflictingStateError",
    "DomainError",
    "DomainValidationError",
    "FilterSpec",
    "InvalidFilterValueError",
    "Page",
    "PriceRange",
    "Product",
    "ProductNotFoundError",
    "RESERVED_PARAMS",
    "SortDirection",
    "SortSpec",
    "UnsupportedProductTypeError",
    "parse_category_ids",
]
