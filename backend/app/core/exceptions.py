"""
Custom exception hierarchy for the Visiora backend.

Provides structured error handling with error codes, user-friendly messages,
and proper HTTP status code mapping.
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for categorizing exceptions."""

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_USER_ID = "INVALID_USER_ID"
    INVALID_SHOP_DOMAIN = "INVALID_SHOP_DOMAIN"

    # Resource errors (404)
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    STORE_NOT_FOUND = "STORE_NOT_FOUND"

    # External service errors (502)
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    UPSTREAM_VERSION_MISMATCH = "UPSTREAM_VERSION_MISMATCH"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    ENCRYPTION_ERROR = "ENCRYPTION_ERROR"
    DECRYPT_ERROR = "DECRYPT_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class AppError(Exception):
    """
    Base application error with structured error information.

    All application-specific exceptions should inherit from this class.

    Attributes:
        code: Error code from ErrorCode enum
        message: Human-readable error message
        details: Additional context (not exposed to users in production)
        http_status: HTTP status code for API responses
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        http_status: int = 500,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.http_status = http_status
        super().__init__(message)

    def to_dict(self, include_details: bool = False) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if include_details and self.details:
            result["error"]["details"] = self.details
        return result


# ============ Validation Errors ============


class ValidationError(AppError):
    """Base class for validation errors."""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        message: str = "Validation failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(code=code, message=message, details=details, http_status=400)


class InvalidUserIdError(ValidationError):
    """Raised when the userId query parameter is missing or not a positive integer."""

    def __init__(self, raw_value: Optional[str] = None):
        super().__init__(
            code=ErrorCode.INVALID_USER_ID,
            message="User ID is required",
            details={"user_id": raw_value},
        )


class InvalidShopDomainError(ValidationError):
    """Raised when a shop domain is not a valid myshopify hostname."""

    def __init__(self, shop_domain: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.INVALID_SHOP_DOMAIN,
            message=f"Invalid shop domain: {shop_domain}",
            details={**(details or {}), "shop_domain": shop_domain},
        )


# ============ Resource Not Found Errors ============


class ResourceNotFoundError(AppError):
    """Base class for resource not found errors."""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND,
        message: str = "Resource not found",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(code=code, message=message, details=details, http_status=404)


class StoreNotFoundError(ResourceNotFoundError):
    """Raised when a user has no active store."""

    def __init__(self, user_id: int, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.STORE_NOT_FOUND,
            message="Store not found for this user",
            details={**(details or {}), "user_id": user_id},
        )


# ============ External Service Errors ============


class ExternalServiceError(AppError):
    """Base class for external service errors."""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.EXTERNAL_SERVICE_ERROR,
        message: str = "External service error",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(code=code, message=message, details=details, http_status=502)


class UpstreamUnavailableError(ExternalServiceError):
    """
    Raised for a network failure, a non-404 HTTP status or an unreadable body
    from the Shopify Admin API.

    ShopifyService resolves it to an empty collection; it only reaches an API
    response when failure reporting is switched on.
    """

    def __init__(
        self,
        shop_domain: str,
        status_code: Optional[int] = None,
        original_error: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        super().__init__(
            code=ErrorCode.UPSTREAM_UNAVAILABLE,
            message=f"Shopify API unavailable for {shop_domain}",
            details={
                **(details or {}),
                "shop_domain": shop_domain,
                "status_code": status_code,
                "original_error": original_error,
            },
        )


class UpstreamVersionMismatchError(ExternalServiceError):
    """Raised when Shopify answers 404 for an API version."""

    def __init__(
        self,
        shop_domain: str,
        api_version: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = 404
        self.api_version = api_version
        super().__init__(
            code=ErrorCode.UPSTREAM_VERSION_MISMATCH,
            message=f"Shopify API version {api_version} not available for {shop_domain}",
            details={
                **(details or {}),
                "shop_domain": shop_domain,
                "api_version": api_version,
            },
        )


# ============ Internal Errors ============


class DatabaseError(AppError):
    """Raised when database operations fail."""

    def __init__(self, operation: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.DATABASE_ERROR,
            message="Database operation failed",
            details={**(details or {}), "operation": operation},
            http_status=500,
        )


class EncryptionError(AppError):
    """Raised when encryption/decryption fails."""

    def __init__(
        self,
        operation: str,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.ENCRYPTION_ERROR,
        message: str = "Encryption operation failed",
    ):
        super().__init__(
            code=code,
            message=message,
            details={**(details or {}), "operation": operation},
            http_status=500,
        )


class DecryptError(EncryptionError):
    """
    Raised when a stored credential envelope cannot be decrypted.

    Covers a malformed envelope, non-hex segments, a wrong key and invalid
    padding. Never swallowed: a broken credential must not look like an
    empty store.
    """

    def __init__(self, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            operation="decrypt",
            details={**(details or {}), "reason": reason},
            code=ErrorCode.DECRYPT_ERROR,
            message="Stored credential could not be decrypted",
        )


class ConfigurationError(AppError):
    """Raised when there's a configuration issue."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.CONFIGURATION_ERROR,
            message=message,
            details=details,
            http_status=500,
        )
