"""
Shared pieces of the search strategies.
"""
from typing import Protocol, Sequence

from internal.domain.product import Page
from internal.domain.value_objects import CatalogContext


# Every search backend answers with pages of this size
SEARCH_PAGE_SIZE = 16


class SearchBackendError(Exception):
    """An external search backend answered with something unusable."""
    pass


class FlatRowLoader(Protocol):
    """Loads storefront-visible flat rows by product id."""

    async def get_flat_by_product_ids(
        self,
        product_ids: Sequence[int],
        context: CatalogContext,
    ) -> list[dict]:
        ...


def search_tokens(term: str) -> list[str]:
    """
    Split a search term into tokens.

    Words are separated by underscores; blank tokens are dropped.
    """
    return [token.strip() for token in (term or "").split("_") if token.strip()]


async def hydrate_hits(
    loader: FlatRowLoader,
    product_ids: Sequence[int],
    total: int,
    context: CatalogContext,
    page: int,
) -> Page:
    """
    Turn index hits into a page of flat rows.

    Rows keep the order of the index. Hits no longer visible in the
    storefront are dropped from the page, ``total`` stays as reported.
    """
    items = await loader.get_flat_by_product_ids(product_ids, context)
    return Page(items=items, total=total, page=page, per_page=SEARCH_PAGE_SIZE)
