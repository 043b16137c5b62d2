"""
Custom exception classes
"""
from fastapi import HTTPException, status


class UnauthorizedError(HTTPException):
    """Raised when the request carries no valid session"""
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
        )


class ForbiddenError(HTTPException):
    """Raised when the caller's roles do not allow the operation"""
    def __init__(self, detail: str = "Access denied"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


class InvalidInputError(HTTPException):
    """Raised on missing or malformed fields"""
    def __init__(self, detail: str = "Invalid input"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )


class NotFoundError(HTTPException):
    """
    Raised when an entity is absent or outside the caller's tenant.
    Cross-tenant access is reported here rather than as 403.
    """
    def __init__(self, entity: str = "Resource"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{entity} not found",
        )


class DuplicateKeyError(HTTPException):
    """Raised when a uniqueness rule is violated"""
    def __init__(self, detail: str = "Duplicate key"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )


class HasActiveDependentsError(HTTPException):
    """Raised when a delete is blocked by live dependent records"""
    def __init__(self, detail: str = "Entity has active dependents"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )


class InvalidTenantConfigurationError(HTTPException):
    """Raised when no tenant scope can be derived for the caller"""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid tenant configuration",
        )


class UpstreamFailureError(HTTPException):
    """Raised when the object store or mail transport fails on a fatal path"""
    def __init__(self, reason: str = "Upstream service failed"):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=reason,
        )
