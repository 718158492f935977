from __future__ import annotations


class CatalogDomainError(ValueError):
    code = "catalog_error"


class CatalogValidationError(CatalogDomainError):
    code = "validation_error"

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class ProductUnavailableError(CatalogDomainError):
    code = "product_not_available"
