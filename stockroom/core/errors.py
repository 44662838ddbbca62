"""Domain errors raised by the service layer.

Routers let these propagate; ``stockroom.core.observability`` renders them
into the standard error envelope using ``status_code`` and ``code``.
"""


class StockroomError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, *, details: list[dict] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(StockroomError):
    status_code = 422
    code = "validation_error"


class InvalidQuantity(ValidationError):
    def __init__(self, quantity: int):
        super().__init__(
            "Quantity must be at least 1",
            details=[{"field": "quantity", "message": "must be at least 1", "type": "value_error"}],
        )
        self.quantity = quantity


class InvalidDateRange(ValidationError):
    def __init__(self):
        super().__init__(
            "to_date cannot be before from_date",
            details=[{"field": "to_date", "message": "must not be before from_date", "type": "value_error"}],
        )


class InsufficientStock(StockroomError):
    status_code = 422
    code = "insufficient_stock"

    def __init__(self, *, available: int, requested: int):
        super().__init__(f"Insufficient stock. Available: {available}, Requested: {requested}")
        self.available = available
        self.requested = requested


class NotFound(StockroomError):
    status_code = 404
    code = "not_found"


class ProductNotFound(NotFound):
    def __init__(self, product_id: int):
        super().__init__("Product not found")
        self.product_id = product_id


class CategoryNotFound(NotFound):
    def __init__(self, category_id: int):
        super().__init__("Category not found")
        self.category_id = category_id


class CategoryInUse(StockroomError):
    status_code = 422
    code = "category_in_use"

    def __init__(self, product_count: int):
        super().__init__(
            "Cannot delete category with existing products. "
            "Please reassign or delete the products first."
        )
        self.product_count = product_count


class Conflict(StockroomError):
    status_code = 409
    code = "conflict"


class DuplicateSku(Conflict):
    def __init__(self, sku: str):
        super().__init__(f"SKU '{sku}' already exists")
        self.sku = sku


class DuplicateCategoryName(Conflict):
    def __init__(self, name: str):
        super().__init__(f"Category '{name}' already exists")
        self.name = name


class ConcurrentStockUpdate(Conflict):
    def __init__(self, product_id: int):
        super().__init__("Stock level changed concurrently. Retry the request.")
        self.product_id = product_id


class StorageUnavailable(StockroomError):
    status_code = 503
    code = "storage_unavailable"

    def __init__(self, message: str = "Storage is unavailable"):
        super().__init__(message)


class LedgerImmutableError(StockroomError):
    """Stock movements are append-only; raised on any ORM update or delete."""

    def __init__(self):
        super().__init__("Stock movements cannot be modified or deleted")
