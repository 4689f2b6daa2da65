"""
Tests for custom exception classes and the error envelope

Tests exception initialization, messages, status codes, error codes and
details, plus how the handlers render them.
"""

import json

import pytest
from fastapi import status

from app.exception_handlers import create_error_response, get_error_type, get_http_error_code
from app.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DatabaseError,
    DormGuardError,
    DuplicateResourceError,
    ErrorCode,
    InvalidCredentialsError,
    InvalidStateError,
    InvalidTokenError,
    RateLimitExceededError,
    ResourceNotFoundError,
    RoomNotFoundError,
    StaffNotFoundError,
    TenantNotFoundError,
    TokenExpiredError,
    ValidationError,
    VisitorLogNotFoundError,
    VisitorNotFoundError,
)


class TestDormGuardError:
    """Test base DormGuardError class"""

    def test_defaults(self):
        """Test DormGuardError with default values"""
        exc = DormGuardError("Test error")
        assert str(exc) == "Test error"
        assert exc.message == "Test error"
        assert exc.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert exc.details == {}
        assert exc.error_code == ErrorCode.UNKNOWN_ERROR

    def test_error_code_override(self):
        exc = DormGuardError("Test error", error_code=ErrorCode.DATABASE_ERROR)
        assert exc.error_code == ErrorCode.DATABASE_ERROR
        # Instance override leaves the class default alone
        assert DormGuardError.error_code == ErrorCode.UNKNOWN_ERROR


class TestAuthenticationExceptions:
    """Test authentication-related exceptions"""

    def test_authentication_error(self):
        exc = AuthenticationError()
        assert str(exc) == "Authentication failed"
        assert exc.status_code == status.HTTP_401_UNAUTHORIZED
        assert exc.error_code == ErrorCode.AUTH_FAILED

    def test_invalid_credentials_error(self):
        """Unknown user and wrong password share one message"""
        exc = InvalidCredentialsError()
        assert str(exc) == "Invalid username or password"
        assert exc.status_code == status.HTTP_401_UNAUTHORIZED
        assert exc.error_code == ErrorCode.AUTH_INVALID_CREDENTIALS

    def test_token_errors(self):
        assert TokenExpiredError().error_code == ErrorCode.AUTH_TOKEN_EXPIRED
        assert InvalidTokenError().error_code == ErrorCode.AUTH_TOKEN_INVALID
        assert isinstance(TokenExpiredError(), AuthenticationError)

    def test_authorization_error(self):
        exc = AuthorizationError(required_role="admin")
        assert exc.status_code == status.HTTP_403_FORBIDDEN
        assert exc.details == {"required_role": "admin"}
        assert exc.error_code == ErrorCode.AUTH_PERMISSION_DENIED


class TestNotFoundExceptions:
    """Test resource not found exceptions"""

    @pytest.mark.parametrize(
        "exc_class, label, code",
        [
            (TenantNotFoundError, "Tenant", ErrorCode.RESOURCE_TENANT_NOT_FOUND),
            (RoomNotFoundError, "Room", ErrorCode.RESOURCE_ROOM_NOT_FOUND),
            (VisitorNotFoundError, "Visitor", ErrorCode.RESOURCE_VISITOR_NOT_FOUND),
            (VisitorLogNotFoundError, "Visitor log", ErrorCode.RESOURCE_VISITOR_LOG_NOT_FOUND),
            (StaffNotFoundError, "Staff member", ErrorCode.RESOURCE_STAFF_NOT_FOUND),
        ],
    )
    def test_specific_not_found(self, exc_class, label, code):
        exc = exc_class(7)
        assert str(exc) == f"{label} with id '7' not found"
        assert exc.status_code == status.HTTP_404_NOT_FOUND
        assert exc.error_code == code
        assert exc.details == {"resource_type": label, "resource_id": 7}
        assert isinstance(exc, ResourceNotFoundError)

    def test_without_id(self):
        assert str(ResourceNotFoundError("Room")) == "Room not found"


class TestValidationError:
    """Test ValidationError reasons"""

    def test_missing_field(self):
        exc = ValidationError("Missing required field: purpose", reason=ValidationError.MISSING_FIELD, field="purpose")
        assert exc.status_code == status.HTTP_400_BAD_REQUEST
        assert exc.reason == "MissingField"
        assert exc.details == {"field": "purpose", "reason": "MissingField"}
        assert exc.error_code == ErrorCode.VALIDATION_MISSING_FIELD

    def test_advance_notice(self):
        exc = ValidationError(
            "Too soon",
            reason=ValidationError.ADVANCE_NOTICE_TOO_SHORT,
            details={"earliest_allowed": "2030-01-01T20:00:00"},
        )
        assert exc.error_code == ErrorCode.VALIDATION_ADVANCE_NOTICE_TOO_SHORT
        assert exc.details["earliest_allowed"] == "2030-01-01T20:00:00"

    def test_no_reason(self):
        exc = ValidationError("Bad input")
        assert exc.reason is None
        assert exc.error_code == ErrorCode.VALIDATION_FAILED


class TestInvalidStateError:
    """Test workflow and ledger state failures"""

    @pytest.mark.parametrize(
        "reason, code",
        [
            (InvalidStateError.ALREADY_PROCESSED, ErrorCode.STATE_ALREADY_PROCESSED),
            (InvalidStateError.NOT_APPROVED, ErrorCode.STATE_NOT_APPROVED),
            (InvalidStateError.ALREADY_CHECKED_IN, ErrorCode.STATE_ALREADY_CHECKED_IN),
            (InvalidStateError.NO_OPEN_SESSION, ErrorCode.STATE_NO_OPEN_SESSION),
            (InvalidStateError.ROOM_FULL, ErrorCode.STATE_ROOM_FULL),
        ],
    )
    def test_reason_maps_to_error_code(self, reason, code):
        exc = InvalidStateError("Nope", reason=reason, details={"room_id": 1})
        assert exc.status_code == status.HTTP_409_CONFLICT
        assert exc.error_code == code
        assert exc.details == {"reason": reason, "room_id": 1}

    def test_unknown_reason_falls_back(self):
        assert InvalidStateError("Nope", reason="Other").error_code == ErrorCode.STATE_INVALID


class TestOtherExceptions:
    def test_duplicate_resource(self):
        exc = DuplicateResourceError("Account", "username", "alice")
        assert str(exc) == "Account with username 'alice' already exists"
        assert exc.status_code == status.HTTP_409_CONFLICT
        assert exc.details["field"] == "username"

    def test_database_error(self):
        exc = DatabaseError(operation="insert")
        assert exc.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert exc.details == {"operation": "insert"}

    def test_rate_limit(self):
        assert RateLimitExceededError().status_code == status.HTTP_429_TOO_MANY_REQUESTS


class TestErrorEnvelope:
    """Test the shared error response shape"""

    def test_create_error_response(self):
        response = create_error_response(
            status_code=409,
            message="Room is at full capacity",
            error_code=ErrorCode.STATE_ROOM_FULL,
            details={"reason": "RoomFull"},
            path="/api/admin/create-tenant",
        )

        body = json.loads(response.body)
        assert response.status_code == 409
        assert body == {
            "error": {
                "status_code": 409,
                "message": "Room is at full capacity",
                "type": "Conflict",
                "error_code": "STATE_ROOM_FULL",
                "details": {"reason": "RoomFull"},
                "path": "/api/admin/create-tenant",
            }
        }

    def test_optional_parts_omitted(self):
        body = json.loads(create_error_response(status_code=404, message="Gone").body)
        assert set(body["error"]) == {"status_code", "message", "type"}

    def test_error_types_and_codes(self):
        assert get_error_type(403) == "Forbidden"
        assert get_error_type(418) == "Error"
        assert get_http_error_code(404) == "RESOURCE_NOT_FOUND"
        assert get_http_error_code(418) == "UNKNOWN_ERROR"
