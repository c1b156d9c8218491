"""
Data Transfer Objects for the Storefront Catalog API.

Contains Pydantic models for response validation.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from internal.domain.product import Page


# Product DTOs
class ProductListItem(BaseModel):
    """
    Flat product row.

    The flat projection carries one column per flat attribute, which
    varies between stores, so unknown columns are passed through.
    """

    id: int = Field(..., description="Flat row ID")
    product_id: int = Field(..., description="Product ID")
    sku: Optional[str] = Field(None, description="SKU")
    type: Optional[str] = Field(None, description="Product type")
    name: Optional[str] = Field(None, description="Product name")
    url_key: Optional[str] = Field(None, description="URL key")
    channel: Optional[str] = Field(None, description="Channel code")
    locale: Optional[str] = Field(None, description="Locale code")
    indexed_min_price: Optional[Decimal] = Field(
        None, description="Minimal price from the customer group's price index"
    )
    indexed_max_price: Optional[Decimal] = Field(
        None, description="Maximal price from the customer group's price index"
    )
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")

    class Config:
        extra = "allow"
        json_schema_extra = {
            "example": {
                "id": 12,
                "product_id": 7,
                "sku": "TSHIRT-RED",
                "type": "configurable",
                "name": "Red T-Shirt",
                "url_key": "red-t-shirt",
                "channel": "default",
                "locale": "en",
                "indexed_min_price": "19.9900",
                "indexed_max_price": "24.9900",
                "created_at": "2024-01-15T10:30:00Z",
            }
        }


# Pagination DTOs
class PaginationInfo(BaseModel):
    """Pagination metadata."""

    page: int = Field(..., description="Current page number")
    per_page: int = Field(..., description="Items per page")
    total_items: int = Field(..., description="Total number of items")
    total_pages: int = Field(..., description="Total number of pages")

    class Config:
        json_schema_extra = {
            "example": {"page": 1, "per_page": 9, "total_items": 143, "total_pages": 16}
        }


class PaginatedResponse(BaseModel):
    """Paginated list of products."""

    data: List[ProductListItem] = Field(..., description="List of products")
    pagination: PaginationInfo = Field(..., description="Pagination information")

    @classmethod
    def from_page(cls, page: Page) -> "PaginatedResponse":
        return cls(
            data=[ProductListItem(**row) for row in page.items],
            pagination=PaginationInfo(
                page=page.page,
                per_page=page.per_page,
                total_items=page.total,
                total_pages=page.total_pages,
            ),
        )


class ProductListResponse(BaseModel):
    """Unpaginated list of products."""

    data: List[ProductListItem] = Field(..., description="List of products")


class ProductResponse(BaseModel):
    """Single product."""

    data: ProductListItem = Field(..., description="Product")


# Category DTOs
class CategoryMaxPriceResponse(BaseModel):
    """Price ceiling of a category."""

    category_id: int = Field(..., description="Category ID")
    max_price: Decimal = Field(..., description="Highest indexed price, 0 when none")

    class Config:
        json_schema_extra = {"example": {"category_id": 3, "max_price": "249.0000"}}


# Attribute DTOs
class AttributeOptionDTO(BaseModel):
    """Option of a select-like attribute."""

    id: int = Field(..., description="Option ID")
    admin_name: Optional[str] = Field(None, description="Admin label")
    sort_order: Optional[int] = Field(None, description="Position")
    swatch_value: Optional[str] = Field(None, description="Swatch value")


class SuperAttributeDTO(BaseModel):
    """Configurable attribute of a product."""

    id: int = Field(..., description="Attribute ID")
    code: str = Field(..., description="Attribute code")
    admin_name: Optional[str] = Field(None, description="Admin label")
    type: str = Field(..., description="Attribute type")
    options: List[AttributeOptionDTO] = Field(default_factory=list, description="Options")

    class Config:
        json_schema_extra = {
            "example": {
                "id": 23,
                "code": "color",
                "admin_name": "Color",
                "type": "select",
                "options": [
                    {"id": 1, "admin_name": "Red", "sort_order": 1, "swatch_value": "#ff0000"}
                ],
            }
        }


class SuperAttributesResponse(BaseModel):
    """Configurable attributes of a product."""

    data: List[SuperAttributeDTO] = Field(..., description="Attributes")


# Error DTOs
class ErrorResponse(BaseModel):
    """Error response body."""

    detail: str
