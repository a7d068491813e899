"""
Domain exceptions for orders app.

Exception Hierarchy:
    OrdersServiceError (base)
    ├── OrderNotFoundError
    ├── OrderValidationError
    │   └── UnknownServiceError
    ├── InvalidQuantityError
    ├── OrderClosedError
    ├── OrderNotClosedError
    └── StaleOrderError
"""


class OrdersServiceError(Exception):
    """Base exception for all orders service errors."""
    pass


class OrderNotFoundError(OrdersServiceError):
    """Raised when an order does not exist."""
    pass


class OrderValidationError(OrdersServiceError):
    """Raised when order input fails validation. Nothing is written."""
    pass


class UnknownServiceError(OrderValidationError):
    """Raised when a line item references a service not in the catalog."""
    pass


class InvalidQuantityError(OrdersServiceError):
    """
    Raised when a line item measurement is not a valid decimal.

    Attributes:
        field: Name of the offending measurement (quantity, length, width)
        value: The rejected value
        index: Position of the line item in the order, when known
    """

    def __init__(self, field, value, index=None):
        self.field = field
        self.value = value
        self.index = index
        super().__init__(self._message())

    def _message(self):
        prefix = f"Line item {self.index}: " if self.index is not None else ''
        return f"{prefix}invalid {self.field} {self.value!r}"

    def at_index(self, index):
        """Attach the line item position and refresh the message."""
        self.index = index
        self.args = (self._message(),)
        return self


class OrderClosedError(OrdersServiceError):
    """Raised when a transition is requested on a delivered or deleted order."""
    pass


class OrderNotClosedError(OrdersServiceError):
    """Raised when an archive-only operation targets an active order."""
    pass


class StaleOrderError(OrdersServiceError):
    """Raised when the order changed between read and write."""
    pass
