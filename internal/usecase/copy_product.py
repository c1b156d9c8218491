"""
Copy Product Use Case.

Duplicates a product through its type strategy, inside one transaction.

The HTTP API does not expose copying; admin tooling builds this use case
with the type strategies it supports.
"""
from typing import Mapping

from internal.domain.errors import ProductNotFoundError, UnsupportedProductTypeError
from internal.domain.ports import ProductTypeStrategy
from internal.domain.product import Product
from internal.infrastructure.postgres.product_repository import PostgresProductRepository
from pkg.logger.logger import get_logger


logger = get_logger(__name__)


class CopyProductUseCase:
    """
    Use case for copying a product.

    Variants cannot be copied on their own; every check runs before the
    transaction starts.
    """

    def __init__(
        self,
        repository: PostgresProductRepository,
        strategies: Mapping[str, ProductTypeStrategy],
    ) -> None:
        """
        Initialize the use case.

        Args:
            repository: Product repository owning the transaction.
            strategies: Type strategies keyed by product type code.
        """
        self._repository = repository
        self._strategies = strategies

    async def execute(self, product_id: int) -> Product:
        """
        Copy a product.

        Args:
            product_id: Product to copy.

        Returns:
            The new product.

        Raises:
            ProductNotFoundError: If the product does not exist.
            ConflictingStateError: If the product is a variant.
            UnsupportedProductTypeError: If no strategy handles the product type.
        """
        product = await self._repository.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        product.ensure_copyable()

        strategy = self._strategies.get(product.type)
        if strategy is None:
            raise UnsupportedProductTypeError(product.type)

        copied = await self._repository.copy(product, strategy)

        logger.info(
            "Product copied",
            product_id=product.id,
            copy_id=copied.id,
            type=product.type,
        )

        return copied
