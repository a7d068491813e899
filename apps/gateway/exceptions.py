"""
Domain exceptions for gateway app.

Exception Hierarchy:
    GatewayError (base)
    ├── UnknownCollectionError
    ├── RecordNotFoundError
    ├── PersistenceError
    └── OperationCancelledError
"""


class GatewayError(Exception):
    """Base exception for all gateway errors."""
    pass


class UnknownCollectionError(GatewayError):
    """Raised when a path does not name a registered collection."""
    pass


class RecordNotFoundError(GatewayError):
    """Raised when a keyed record does not exist."""
    pass


class PersistenceError(GatewayError):
    """
    Raised when a read or write against the store fails.

    Transient failures are retried before this is raised, so callers
    should surface it as a generic failure notice.
    """
    pass


class OperationCancelledError(GatewayError):
    """Raised when a cancellation token is set before a blob write completes."""
    pass
