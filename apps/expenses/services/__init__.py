"""Services for expense recording and device attribution."""

from .exceptions import (
    ExpensesServiceError,
    ExpenseNotFoundError,
    ExpenseValidationError,
    MissingDeviceTokenError,
    ReporterNameRequiredError,
)
from .identity import (
    extract_device_key,
    resolve_identity,
    register_identity,
)
from .ledger import (
    record_expense,
    get_expense,
    update_expense,
    delete_expense,
    list_expenses,
)

__all__ = [
    # Exceptions
    'ExpensesServiceError',
    'ExpenseNotFoundError',
    'ExpenseValidationError',
    'MissingDeviceTokenError',
    'ReporterNameRequiredError',
    # Identity
    'extract_device_key',
    'resolve_identity',
    'register_identity',
    # Ledger
    'record_expense',
    'get_expense',
    'update_expense',
    'delete_expense',
    'list_expenses',
]
