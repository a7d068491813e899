"""Domain-specific exceptions for expenses services."""


class ExpensesServiceError(Exception):
    """Base exception for expenses services."""
    pass


class ExpenseNotFoundError(ExpensesServiceError):
    """Raised when a cost does not exist."""
    pass


class ExpenseValidationError(ExpensesServiceError):
    """Raised when a name, price or date range is rejected. Nothing is written."""
    pass


class MissingDeviceTokenError(ExpenseValidationError):
    """Raised when no device token accompanies an expense."""
    pass


class ReporterNameRequiredError(ExpensesServiceError):
    """
    Raised when an unregistered device records its first expense
    without giving a display name.
    """
    pass
