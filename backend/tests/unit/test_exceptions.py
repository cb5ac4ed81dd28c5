"""
Unit tests for custom exceptions.
"""

import pytest

from app.core.exceptions import (
    AppError,
    ConfigurationError,
    DatabaseError,
    DecryptError,
    EncryptionError,
    ErrorCode,
    ExternalServiceError,
    InvalidShopDomainError,
    InvalidUserIdError,
    ResourceNotFoundError,
    StoreNotFoundError,
    UpstreamUnavailableError,
    UpstreamVersionMismatchError,
    ValidationError,
)


class TestAppError:
    """Tests for base AppError class."""

    def test_app_error_creation(self):
        """Test basic AppError creation."""
        error = AppError(
            code=ErrorCode.INTERNAL_ERROR,
            message="Test error",
            details={"key": "value"},
            http_status=500,
        )

        assert error.code == ErrorCode.INTERNAL_ERROR
        assert error.message == "Test error"
        assert error.details == {"key": "value"}
        assert error.http_status == 500
        assert str(error) == "Test error"

    def test_app_error_to_dict(self):
        """Test AppError to_dict conversion."""
        error = AppError(
            code=ErrorCode.VALIDATION_ERROR,
            message="Invalid input",
            details={"field": "userId"},
        )

        result = error.to_dict(include_details=False)
        assert result == {
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid input",
            }
        }

        result_with_details = error.to_dict(include_details=True)
        assert result_with_details["error"]["details"] == {"field": "userId"}

    def test_no_details_key_when_empty(self):
        error = AppError(code=ErrorCode.INTERNAL_ERROR, message="Boom")
        assert "details" not in error.to_dict(include_details=True)["error"]


class TestValidationErrors:
    """Tests for validation errors."""

    def test_invalid_user_id(self):
        """Test InvalidUserIdError."""
        error = InvalidUserIdError("abc")
        assert isinstance(error, ValidationError)
        assert error.code == ErrorCode.INVALID_USER_ID
        assert error.http_status == 400
        assert error.message == "User ID is required"
        assert error.details["user_id"] == "abc"

    def test_invalid_shop_domain(self):
        """Test InvalidShopDomainError."""
        error = InvalidShopDomainError("evil.com")
        assert error.code == ErrorCode.INVALID_SHOP_DOMAIN
        assert error.http_status == 400
        assert "evil.com" in error.message


class TestNotFoundErrors:
    """Tests for resource not found errors."""

    def test_store_not_found(self):
        """Test StoreNotFoundError."""
        error = StoreNotFoundError(user_id=7)
        assert isinstance(error, ResourceNotFoundError)
        assert error.code == ErrorCode.STORE_NOT_FOUND
        assert error.http_status == 404
        assert error.message == "Store not found for this user"
        assert error.details["user_id"] == 7


class TestExternalServiceErrors:
    """Tests for Shopify upstream errors."""

    def test_upstream_unavailable(self):
        """Test UpstreamUnavailableError."""
        error = UpstreamUnavailableError("shop.myshopify.com", status_code=503, original_error="down")
        assert isinstance(error, ExternalServiceError)
        assert error.code == ErrorCode.UPSTREAM_UNAVAILABLE
        assert error.http_status == 502
        assert error.status_code == 503
        assert error.details["original_error"] == "down"

    def test_upstream_unavailable_network_failure_has_no_status(self):
        error = UpstreamUnavailableError("shop.myshopify.com")
        assert error.status_code is None

    def test_version_mismatch(self):
        """Test UpstreamVersionMismatchError."""
        error = UpstreamVersionMismatchError("shop.myshopify.com", "2024-07")
        assert isinstance(error, ExternalServiceError)
        assert error.code == ErrorCode.UPSTREAM_VERSION_MISMATCH
        assert error.status_code == 404
        assert error.api_version == "2024-07"
        assert "2024-07" in error.message


class TestInternalErrors:
    """Tests for internal errors."""

    def test_database_error(self):
        """Test DatabaseError."""
        error = DatabaseError(operation="get_active_store")
        assert error.code == ErrorCode.DATABASE_ERROR
        assert error.http_status == 500
        assert error.details["operation"] == "get_active_store"

    def test_decrypt_error(self):
        """Test DecryptError."""
        error = DecryptError("invalid padding")
        assert isinstance(error, EncryptionError)
        assert error.code == ErrorCode.DECRYPT_ERROR
        assert error.http_status == 500
        assert error.details == {"reason": "invalid padding", "operation": "decrypt"}
        assert "padding" not in error.message

    def test_configuration_error(self):
        """Test ConfigurationError."""
        error = ConfigurationError("ENCRYPTION_KEY is not set")
        assert error.code == ErrorCode.CONFIGURATION_ERROR
        assert error.http_status == 500


class TestErrorHierarchy:
    """Every application error can be caught as AppError."""

    @pytest.mark.parametrize(
        "error",
        [
            InvalidUserIdError(None),
            StoreNotFoundError(1),
            UpstreamUnavailableError("shop.myshopify.com"),
            DecryptError("bad"),
            ConfigurationError("missing"),
        ],
    )
    def test_catch_as_app_error(self, error):
        with pytest.raises(AppError):
            raise error
