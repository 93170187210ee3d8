"""In-memory product catalog for tests and development."""

from reviews.catalog.port import ProductCatalogPort


class InMemoryProductCatalog(ProductCatalogPort):
    def __init__(self, names: dict[str, str] | None = None):
        self._names = dict(names or {})

    def add_product(self, product_id: str, name: str) -> None:
        self._names[product_id] = name

    def product_name(self, product_id: str) -> str | None:
        return self._names.get(product_id)
