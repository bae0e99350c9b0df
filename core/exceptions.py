"""
Custom application exceptions.

These exceptions describe ledger and ambassador errors. Each kind maps to one
HTTP status in the API error middleware.
"""
from typing import Optional


class LedgerError(Exception):
    """Base exception for all application errors."""
    
    message: str = "Unexpected error"
    kind: str = "error"
    
    def __init__(self, message: Optional[str] = None, **kwargs):
        self.message = message or self.message
        self.details = kwargs
        super().__init__(self.message)


# ============== Validation ==============

class ValidationError(LedgerError):
    """Missing or malformed input."""
    message = "Validation error"
    kind = "validation_error"
    
    def __init__(self, field: str, error: str):
        self.field = field
        self.error = error
        super().__init__(f"Invalid field '{field}': {error}", field=field)


# ============== Not found ==============

class NotFoundError(LedgerError):
    """Requested entity does not exist."""
    message = "Not found"
    kind = "not_found"


class AmbassadorNotFoundError(NotFoundError):
    """Ambassador not found."""
    message = "Ambassador not found"
    
    def __init__(self, ambassador_id: Optional[int] = None):
        self.ambassador_id = ambassador_id
        super().__init__(
            f"Ambassador #{ambassador_id} not found" if ambassador_id is not None else None,
            ambassador_id=ambassador_id,
        )


class OrderNotFoundError(NotFoundError):
    """Order entry not found on the ambassador."""
    message = "Order not found"
    
    def __init__(self, ambassador_id: int, order_id: str):
        self.ambassador_id = ambassador_id
        self.order_id = order_id
        super().__init__(
            f"Order '{order_id}' not found for ambassador #{ambassador_id}",
            ambassador_id=ambassador_id,
            order_id=order_id,
        )


class CodeNotFoundError(NotFoundError):
    """No approved ambassador holds the code."""
    message = "Invalid ambassador code"
    
    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Invalid ambassador code: {code}", code=code)


# ============== Conflicts ==============

class DuplicateKeyError(LedgerError):
    """Unique value already taken (email, coupon code)."""
    message = "Duplicate key"
    kind = "duplicate_key"
    
    def __init__(self, field: str, value: str, message: Optional[str] = None):
        self.field = field
        self.value = value
        super().__init__(
            message or f"An ambassador with this {field} already exists",
            field=field,
        )


class AlreadyRedeemedError(LedgerError):
    """Order was already attributed to the ambassador."""
    message = "Order already redeemed"
    kind = "already_redeemed"
    
    def __init__(self, ambassador_id: int, order_id: str):
        self.ambassador_id = ambassador_id
        self.order_id = order_id
        super().__init__(
            f"Order '{order_id}' was already redeemed for ambassador #{ambassador_id}",
            ambassador_id=ambassador_id,
            order_id=order_id,
        )


# ============== Storage ==============

class StorageUnavailableError(LedgerError):
    """Backing store unreachable or the connection dropped."""
    message = "Storage temporarily unavailable"
    kind = "storage_unavailable"
