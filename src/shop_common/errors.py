"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: User/Auth
  3xxx: Catalog
  4xxx: Order
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)

    @property
    def kind(self) -> str:
        return type(self).__name__.removesuffix("Error")

    def detail(self) -> dict[str, object]:
        """Payload placed under ApiResponse.data for this error."""
        return {"error": self.kind}


class LineError(AppError):
    """An error tied to one requested order line."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int,
        product_id: int,
        line_index: int | None = None,
    ) -> None:
        self.product_id = product_id
        self.line_index = line_index
        super().__init__(code, message, http_status)

    def detail(self) -> dict[str, object]:
        return {
            "error": self.kind,
            "product_id": self.product_id,
            "line_index": self.line_index,
        }


# --- 1xxx: User/Auth ---

class UserNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(1001, f"User not found: {user_id}", 404)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Invalid or expired token", 401)


# --- 3xxx: Catalog ---

class ProductNotFoundError(LineError):
    def __init__(self, product_id: int, line_index: int | None = None) -> None:
        super().__init__(
            3001, f"Product not found: {product_id}", 404, product_id, line_index
        )


class InsufficientStockError(LineError):
    def __init__(
        self,
        product_id: int,
        requested: int,
        available: int | None,
        line_index: int | None = None,
    ) -> None:
        self.requested = requested
        # None when the stock level moved before it could be read back
        self.available = available
        shortfall = (
            f"available {available}" if available is not None else "stock changed concurrently"
        )
        super().__init__(
            3002,
            f"Insufficient stock for product {product_id}: "
            f"requested {requested}, {shortfall}",
            400,
            product_id,
            line_index,
        )

    def detail(self) -> dict[str, object]:
        data = super().detail()
        data["requested"] = self.requested
        data["available"] = self.available
        return data


# --- 4xxx: Order ---

class OrderNotFoundError(AppError):
    def __init__(self, order_id: int) -> None:
        self.order_id = order_id
        super().__init__(4001, f"Order not found: {order_id}", 404)


class AlreadyCancelledError(AppError):
    def __init__(self, order_id: int) -> None:
        self.order_id = order_id
        super().__init__(4002, f"Order {order_id} is already cancelled", 400)


class InvalidInputError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4003, f"Invalid input: {detail}", 400)


# --- 9xxx: System ---

class StorageFailureError(AppError):
    def __init__(self, detail: str = "Storage operation failed") -> None:
        super().__init__(9001, detail, 500)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
