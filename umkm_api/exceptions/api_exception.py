"""API exception module.

Every error the services raise is an ``HTTPException`` subclass so the
routers can let it propagate untouched. Each one keeps the ids and
quantities involved as attributes for callers that need more than the
message.
"""
from typing import Iterable, Optional

from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception class."""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
    ):
        super().__init__(status_code=status_code, detail=detail)

    def __str__(self) -> str:
        return str(self.detail)


# --- NotFound ---


class NotFoundError(APIException):
    """Resource not found exception."""

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ProductNotFoundError(NotFoundError):
    """A single product id does not exist."""

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(detail=f"Product with id {product_id} not found")


class ProductsNotFoundError(NotFoundError):
    """One or more product ids referenced by a sale do not exist."""

    def __init__(self, missing_ids: Iterable[int]):
        self.missing_ids = sorted(missing_ids)
        joined = ", ".join(str(product_id) for product_id in self.missing_ids)
        super().__init__(detail=f"Products not found: {joined}")


# --- ValidationFailed ---


class ValidationFailedError(APIException):
    """Malformed input that passed schema validation."""

    def __init__(self, detail: str = "Validation failed"):
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class EmptyItemListError(ValidationFailedError):
    """A sale was requested without any items."""

    def __init__(self):
        super().__init__(detail="At least one item is required")


# --- InsufficientStock ---


class InsufficientStockError(APIException):
    """A stock debit would take a product below zero."""

    def __init__(
        self,
        detail: str,
        product_id: Optional[int] = None,
        product_name: Optional[str] = None,
        available: Optional[int] = None,
        requested: Optional[int] = None,
        attempted_change: Optional[int] = None,
    ):
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested
        self.attempted_change = attempted_change
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)

    @classmethod
    def for_sale(
        cls, product_id: int, product_name: str, available: int, requested: int
    ) -> "InsufficientStockError":
        return cls(
            detail=(
                f"Insufficient stock for product {product_name}. "
                f"Available: {available}, Requested: {requested}"
            ),
            product_id=product_id,
            product_name=product_name,
            available=available,
            requested=requested,
        )

    @classmethod
    def for_adjustment(
        cls, product_id: int, current_stock: int, attempted_change: int
    ) -> "InsufficientStockError":
        return cls(
            detail=(
                f"Insufficient stock. Current stock: {current_stock}, "
                f"Attempted change: {attempted_change}"
            ),
            product_id=product_id,
            available=current_stock,
            attempted_change=attempted_change,
        )

    @property
    def current_stock(self) -> Optional[int]:
        return self.available


# --- ConflictingReference ---


class ConflictingReferenceError(APIException):
    """An operation is blocked by rows that reference the target."""

    def __init__(self, detail: str = "Resource is still referenced"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ProductHasSalesHistoryError(ConflictingReferenceError):
    """A product cannot be deleted once it appears in a sale."""

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(detail="Cannot delete product with existing sales history")


# --- StoreUnavailable ---


class StoreUnavailableError(APIException):
    """The underlying database failed."""

    def __init__(self, detail: str = "Data store unavailable"):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
