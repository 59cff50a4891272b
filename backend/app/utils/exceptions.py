"""
Custom exception classes

Domain errors carry a stable ``code``; services hand them back inside result
objects. The HTTP variants at the bottom are raised by the API layer only.
"""
from fastapi import HTTPException


class DomainError(Exception):
    """Base class for errors reported to callers as typed results"""
    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    """Raised when a case, hearing or document id is unmatched"""
    code = "not_found"

    def __init__(self, kind: str, item_id: str):
        super().__init__(f"{kind} {item_id} not found")
        self.kind = kind
        self.item_id = item_id


class ValidationFailure(DomainError):
    """Raised when a required field is missing or a change is not allowed"""
    code = "validation_failed"


class StorageError(DomainError):
    """Raised when the underlying store cannot be read or written"""
    code = "storage_failure"


class AuthError(DomainError):
    """Raised on bad credentials or biometric rejection"""
    code = "auth_failed"


# ============================================================================
# HTTP mapping
# ============================================================================

class ResourceNotFoundError(HTTPException):
    """Raised when a case, hearing, document or notification does not exist"""
    def __init__(self, detail: str):
        super().__init__(
            status_code=404,
            detail=detail
        )


class RequestValidationFailed(HTTPException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=422,
            detail=detail
        )


class StorageUnavailableError(HTTPException):
    """Raised when a write to the store fails"""
    def __init__(self, reason: str = "Unknown error"):
        super().__init__(
            status_code=503,
            detail=f"Storage error: {reason}"
        )


class UnauthorizedError(HTTPException):
    """Raised when there is no valid session"""
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(
            status_code=401,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


def raise_for_error(error) -> None:
    """Turn an ErrorDetail from a service result into the matching HTTP error."""
    if error is None:
        return
    if error.code == NotFoundError.code:
        raise ResourceNotFoundError(error.message)
    if error.code == ValidationFailure.code:
        raise RequestValidationFailed(error.message)
    if error.code == AuthError.code:
        raise UnauthorizedError(error.message)
    raise StorageUnavailableError(error.message)
