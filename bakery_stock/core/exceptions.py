"""
Domain errors raised by the stock services.

Services never raise HTTPException directly; the app registers a handler
that renders any StockError as {"error": kind, "message": message}.

Usage:
    from bakery_stock.core.exceptions import NotFoundError, ConflictError

    raise NotFoundError("Product", product_id)
    raise ConflictError("Stock entry already exists for this date")
"""
from typing import Any, Optional


class StockError(Exception):
    """Base class for errors surfaced to callers as structured results."""

    kind = "stock_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.kind, "message": self.message}


class NotFoundError(StockError):
    """Referenced product, ingredient, store or entry does not exist."""

    kind = "not_found"
    status_code = 404

    def __init__(self, entity: str, entity_id: Any = None):
        if entity_id is not None:
            message = f"{entity} {entity_id} not found"
        else:
            message = f"{entity} not found"
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(StockError):
    """Duplicate stock entry for a (date, product, store) triple."""

    kind = "conflict"
    status_code = 409


class ValidationError(StockError):
    """Input rejected by a domain rule (never coerced to a default)."""

    kind = "validation_error"
    status_code = 422

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        return data


class InsufficientStockError(StockError):
    """A deduction would drive production center stock below zero."""

    kind = "insufficient_stock"
    status_code = 409

    def __init__(self, product_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient inventory for {product_name}. "
            f"Available: {available}, Requested: {requested}"
        )
        self.available = available
        self.requested = requested
