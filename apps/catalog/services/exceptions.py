"""Domain-specific exceptions for catalog services."""


class CatalogServiceError(Exception):
    """Base exception for catalog services."""
    pass


class ServiceNotFoundError(CatalogServiceError):
    """Raised when a catalog entry does not exist."""
    pass


class CatalogValidationError(CatalogServiceError):
    """Raised when a name or price is rejected. Nothing is written."""
    pass
