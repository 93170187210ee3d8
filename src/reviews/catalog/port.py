"""Product catalog port — read-only view of the "products" collection.

The reviews context only needs product display names for the admin
moderation queue.
"""

from abc import ABC, abstractmethod


class ProductCatalogPort(ABC):
    """Abstract interface for product catalog adapters."""

    @abstractmethod
    def product_name(self, product_id: str) -> str | None:
        """Return the product's display name, or None if it is unknown."""
        ...
