# src/core/exceptions.py
from uuid import UUID


# ================================
# CUSTOM EXCEPTIONS
# ================================
class InventoryException(Exception):
    """Base exception for inventory operations"""
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationError(InventoryException):
    """Raised when input is malformed or out of range"""
    def __init__(self, message: str = "Validation failed"):
        super().__init__(message, status_code=400)


class NotFoundException(InventoryException):
    """Raised when a resource is not found"""
    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class ForbiddenError(InventoryException):
    """Raised when the caller's organization does not own the resource"""
    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, status_code=403)


class ConflictError(InventoryException):
    """Raised on uniqueness violations"""
    def __init__(self, message: str = "Conflict", status_code: int = 409):
        super().__init__(message, status_code=status_code)


class VersionConflictError(ConflictError):
    """Raised when a stock row was modified since the caller read it"""
    def __init__(self, item_id: UUID, location_id: UUID, message: str | None = None):
        self.item_id = item_id
        self.location_id = location_id
        super().__init__(
            message or f"Stock for item {item_id} at location {location_id} was modified concurrently"
        )


class StorageError(InventoryException):
    """Raised when the database backend fails"""
    def __init__(self, message: str = "Storage failure", status_code: int = 500):
        super().__init__(message, status_code=status_code)


class TransactionTimeoutError(StorageError, TimeoutError):
    """Raised when a unit of work exceeds its time budget"""
    def __init__(self, message: str = "Transaction timed out"):
        super().__init__(message, status_code=504)
