"""
Error taxonomy shared by the services and the HTTP layer.
Each error knows the HTTP status and error_code it is rendered with.
"""


class StockroomError(Exception):
    status_code = 400
    error_code = "STOCKROOM_ERROR"

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        return {
            "success": False,
            "error_code": self.error_code,
            "message": self.message,
            **self.details,
        }


class ValidationError(StockroomError):
    """Malformed or missing input."""
    status_code = 400
    error_code = "VALIDATION_ERROR"


class NotFoundError(StockroomError):
    status_code = 404
    error_code = "NOT_FOUND"


class InsufficientStockFailure(StockroomError):
    """
    Allocation aborted for lack of unsold codes. The order stays PENDING;
    this is an expected outcome, not something to retry automatically.
    """
    status_code = 409
    error_code = "INSUFFICIENT_STOCK"

    def __init__(self, order_id, requested, available):
        super().__init__(
            f"Not enough stock to approve {order_id}: requested={requested}, available={available}",
            requested=requested,
            available=available,
        )


class InvalidTransitionError(StockroomError):
    status_code = 409
    error_code = "INVALID_TRANSITION"

    def __init__(self, order_id, current, target):
        super().__init__(
            f"Cannot transition order {order_id} from {current} to {target}",
            status=current,
        )


class StoreConflictError(StockroomError):
    """Transient: the unit of work could not be serialized. Safe to retry from scratch."""
    status_code = 503
    error_code = "STORE_CONFLICT"


class AllocationError(StockroomError):
    """The selection strategy broke its contract; nothing was written."""
    status_code = 500
    error_code = "ALLOCATION_ERROR"
