"""Custom exception hierarchy for catalogbench."""

from __future__ import annotations


class CatalogBenchError(Exception):
    """Base exception for all catalogbench errors.

    Both the service and the test client raise subclasses of this, so a
    single except clause catches anything the package itself signals.
    """


class ConfigError(CatalogBenchError):
    """Raised when configuration is invalid or missing.

    Examples:
        - ``PORT`` is not an integer.
        - The client config file is not valid JSON.
        - A configuration edit supplies a negative concurrency.
    """


class StoreError(CatalogBenchError):
    """Raised when the document store cannot complete an operation."""


class ProductNotFound(CatalogBenchError):
    """Raised when no product exists under the requested identifier."""

    def __init__(self, product_id: str) -> None:
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id


class ProductValidationError(CatalogBenchError):
    """Raised when a product payload fails schema checks.

    The message is meant to be shown to API callers as-is.
    """
