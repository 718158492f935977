from __future__ import annotations


class OrderDomainError(ValueError):
    code = "order_error"


class OrderValidationError(OrderDomainError):
    code = "validation_error"

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class ProductNotFoundError(OrderDomainError):
    code = "product_not_found"

    def __init__(self, message: str = "Product not found.", *, product_id=None):
        super().__init__(message)
        self.product_id = product_id


class InsufficientStockError(OrderDomainError):
    code = "insufficient_stock"

    def __init__(self, message: str = "Insufficient stock.", *, product_id=None):
        super().__init__(message)
        self.product_id = product_id


class OrderNotFoundError(OrderDomainError):
    code = "order_not_found"


class OrderAccessDeniedError(OrderDomainError):
    code = "order_access_denied"


class InvalidOrderTransitionError(OrderDomainError):
    code = "invalid_state_transition"


class OrderAlreadyShippedError(InvalidOrderTransitionError):
    code = "order_already_shipped"


class OrderNotCancellableError(InvalidOrderTransitionError):
    code = "order_cannot_be_cancelled"
