"""
Custom Exception Classes for DormGuard

This module defines custom exceptions for better error handling and
consistent error responses across the application.

Every exception carries a machine-readable ``error_code`` and, for workflow
and ledger failures, the ``reason`` naming the precondition that failed.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in the error envelope."""

    # Authentication & authorization
    AUTH_FAILED = "AUTH_FAILED"
    AUTH_INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    AUTH_TOKEN_EXPIRED = "AUTH_TOKEN_EXPIRED"
    AUTH_TOKEN_INVALID = "AUTH_TOKEN_INVALID"
    AUTH_PERMISSION_DENIED = "AUTH_PERMISSION_DENIED"

    # Resources
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_TENANT_NOT_FOUND = "RESOURCE_TENANT_NOT_FOUND"
    RESOURCE_ROOM_NOT_FOUND = "RESOURCE_ROOM_NOT_FOUND"
    RESOURCE_VISITOR_NOT_FOUND = "RESOURCE_VISITOR_NOT_FOUND"
    RESOURCE_VISITOR_LOG_NOT_FOUND = "RESOURCE_VISITOR_LOG_NOT_FOUND"
    RESOURCE_STAFF_NOT_FOUND = "RESOURCE_STAFF_NOT_FOUND"

    # Validation
    VALIDATION_FAILED = "VALIDATION_FAILED"
    VALIDATION_MISSING_FIELD = "VALIDATION_MISSING_FIELD"
    VALIDATION_ADVANCE_NOTICE_TOO_SHORT = "VALIDATION_ADVANCE_NOTICE_TOO_SHORT"
    VALIDATION_NO_FIELDS = "VALIDATION_NO_FIELDS"
    VALIDATION_DUPLICATE_RESOURCE = "VALIDATION_DUPLICATE_RESOURCE"

    # Workflow / ledger state
    STATE_INVALID = "STATE_INVALID"
    STATE_ALREADY_PROCESSED = "STATE_ALREADY_PROCESSED"
    STATE_NOT_APPROVED = "STATE_NOT_APPROVED"
    STATE_ALREADY_CHECKED_IN = "STATE_ALREADY_CHECKED_IN"
    STATE_NO_OPEN_SESSION = "STATE_NO_OPEN_SESSION"
    STATE_ROOM_FULL = "STATE_ROOM_FULL"

    # Infrastructure
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class DormGuardError(Exception):
    """Base exception class for all DormGuard exceptions"""

    error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
        error_code: ErrorCode | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        if error_code is not None:
            self.error_code = error_code
        super().__init__(self.message)


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class AuthenticationError(DormGuardError):
    """Raised when authentication fails"""

    error_code = ErrorCode.AUTH_FAILED

    def __init__(self, message: str = "Authentication failed", details: dict[str, Any] | None = None):
        super().__init__(message=message, status_code=status.HTTP_401_UNAUTHORIZED, details=details or {})


class InvalidCredentialsError(AuthenticationError):
    """Raised when login credentials are invalid"""

    error_code = ErrorCode.AUTH_INVALID_CREDENTIALS

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message=message)


class TokenExpiredError(AuthenticationError):
    """Raised when JWT token has expired"""

    error_code = ErrorCode.AUTH_TOKEN_EXPIRED

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message=message)


class InvalidTokenError(AuthenticationError):
    """Raised when JWT token is invalid"""

    error_code = ErrorCode.AUTH_TOKEN_INVALID

    def __init__(self, message: str = "Invalid or malformed token"):
        super().__init__(message=message)


class AuthorizationError(DormGuardError):
    """Raised when the caller's role or ownership does not permit an action"""

    error_code = ErrorCode.AUTH_PERMISSION_DENIED

    def __init__(
        self, message: str = "You do not have permission to perform this action", required_role: str | None = None
    ):
        details = {"required_role": required_role} if required_role else {}
        super().__init__(message=message, status_code=status.HTTP_403_FORBIDDEN, details=details)


# ============================================================================
# Resource Not Found Exceptions
# ============================================================================


class ResourceNotFoundError(DormGuardError):
    """Base class for resource not found errors"""

    error_code = ErrorCode.RESOURCE_NOT_FOUND

    def __init__(self, resource_type: str, resource_id: Any | None = None):
        message = f"{resource_type} not found"
        if resource_id is not None:
            message = f"{resource_type} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class TenantNotFoundError(ResourceNotFoundError):
    """Raised when a tenant is not found"""

    error_code = ErrorCode.RESOURCE_TENANT_NOT_FOUND

    def __init__(self, tenant_id: Any | None = None):
        super().__init__(resource_type="Tenant", resource_id=tenant_id)


class RoomNotFoundError(ResourceNotFoundError):
    """Raised when a room is not found"""

    error_code = ErrorCode.RESOURCE_ROOM_NOT_FOUND

    def __init__(self, room_id: Any | None = None):
        super().__init__(resource_type="Room", resource_id=room_id)


class VisitorNotFoundError(ResourceNotFoundError):
    """Raised when a visitor is not found"""

    error_code = ErrorCode.RESOURCE_VISITOR_NOT_FOUND

    def __init__(self, visitor_id: Any | None = None):
        super().__init__(resource_type="Visitor", resource_id=visitor_id)


class VisitorLogNotFoundError(ResourceNotFoundError):
    """Raised when a visitor log entry is not found"""

    error_code = ErrorCode.RESOURCE_VISITOR_LOG_NOT_FOUND

    def __init__(self, log_id: Any | None = None):
        super().__init__(resource_type="Visitor log", resource_id=log_id)


class StaffNotFoundError(ResourceNotFoundError):
    """Raised when a staff account is not found"""

    error_code = ErrorCode.RESOURCE_STAFF_NOT_FOUND

    def __init__(self, admin_id: Any | None = None):
        super().__init__(resource_type="Staff member", resource_id=admin_id)


# ============================================================================
# Validation & Business Logic Exceptions
# ============================================================================


class ValidationError(DormGuardError):
    """Raised when input validation fails"""

    error_code = ErrorCode.VALIDATION_FAILED

    MISSING_FIELD = "MissingField"
    ADVANCE_NOTICE_TOO_SHORT = "AdvanceNoticeTooShort"
    NO_FIELDS = "NoFields"

    _CODES = {
        MISSING_FIELD: ErrorCode.VALIDATION_MISSING_FIELD,
        ADVANCE_NOTICE_TOO_SHORT: ErrorCode.VALIDATION_ADVANCE_NOTICE_TOO_SHORT,
        NO_FIELDS: ErrorCode.VALIDATION_NO_FIELDS,
    }

    def __init__(
        self,
        message: str,
        reason: str | None = None,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        error_details = details or {}
        if field:
            error_details["field"] = field
        if reason:
            error_details["reason"] = reason
        self.reason = reason
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=error_details,
            error_code=self._CODES.get(reason),
        )


class InvalidStateError(DormGuardError):
    """Raised when a record is in the wrong state for the requested transition"""

    error_code = ErrorCode.STATE_INVALID

    ALREADY_PROCESSED = "AlreadyProcessed"
    NOT_APPROVED = "NotApproved"
    ALREADY_CHECKED_IN = "AlreadyCheckedIn"
    NO_OPEN_SESSION = "NoOpenSession"
    ROOM_FULL = "RoomFull"

    _CODES = {
        ALREADY_PROCESSED: ErrorCode.STATE_ALREADY_PROCESSED,
        NOT_APPROVED: ErrorCode.STATE_NOT_APPROVED,
        ALREADY_CHECKED_IN: ErrorCode.STATE_ALREADY_CHECKED_IN,
        NO_OPEN_SESSION: ErrorCode.STATE_NO_OPEN_SESSION,
        ROOM_FULL: ErrorCode.STATE_ROOM_FULL,
    }

    def __init__(self, message: str, reason: str, details: dict[str, Any] | None = None):
        self.reason = reason
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            details={"reason": reason, **(details or {})},
            error_code=self._CODES.get(reason),
        )


class DuplicateResourceError(DormGuardError):
    """Raised when attempting to create a duplicate resource"""

    error_code = ErrorCode.VALIDATION_DUPLICATE_RESOURCE

    def __init__(self, resource_type: str, field: str, value: Any):
        super().__init__(
            message=f"{resource_type} with {field} '{value}' already exists",
            status_code=status.HTTP_409_CONFLICT,
            details={"resource_type": resource_type, "field": field, "value": value},
        )


# ============================================================================
# Database & Service Exceptions
# ============================================================================


class DatabaseError(DormGuardError):
    """Raised when a database operation fails"""

    error_code = ErrorCode.DATABASE_ERROR

    def __init__(self, message: str = "A database error occurred", operation: str | None = None):
        details = {"operation": operation} if operation else {}
        super().__init__(message=message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, details=details)


class RateLimitExceededError(DormGuardError):
    """Raised when rate limit is exceeded"""

    error_code = ErrorCode.RATE_LIMIT_EXCEEDED

    def __init__(self, message: str = "Rate limit exceeded. Please try again later."):
        super().__init__(message=message, status_code=status.HTTP_429_TOO_MANY_REQUESTS)
