"""Services for catalog business logic."""

from .exceptions import (
    CatalogServiceError,
    ServiceNotFoundError,
    CatalogValidationError,
)
from .catalog_management import (
    create_service,
    update_service,
    delete_service,
    get_service,
    list_services,
)

__all__ = [
    # Exceptions
    'CatalogServiceError',
    'ServiceNotFoundError',
    'CatalogValidationError',
    # Catalog Management
    'create_service',
    'update_service',
    'delete_service',
    'get_service',
    'list_services',
]
