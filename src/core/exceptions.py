"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    MALFORMED_TOKEN = "MALFORMED_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"

    # Identity provider errors
    PROVIDER_REJECTED = "PROVIDER_REJECTED"
    PROVIDER_UNREACHABLE = "PROVIDER_UNREACHABLE"
    UNKNOWN_PROVIDER = "UNKNOWN_PROVIDER"

    # Profile errors
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    IRRECONCILABLE_PROFILE = "IRRECONCILABLE_PROFILE"
    PROFILE_MISMATCH = "PROFILE_MISMATCH"
    CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"

    # Upload errors
    UNSUPPORTED_MEDIA_TYPE = "UNSUPPORTED_MEDIA_TYPE"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    STORAGE_FAILURE = "STORAGE_FAILURE"

    # Validation errors (422)
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppException(Exception):
    """Base application exception."""

    retryable: bool = False

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


# --- Authentication ---


class AuthError(AppException):
    """Credential missing or failed verification. Terminal for the request."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class InvalidSignatureError(AuthError):
    """Credential signature does not match its contents."""

    def __init__(self) -> None:
        super().__init__(
            message="Credential signature is invalid",
            error_code=ErrorCode.INVALID_SIGNATURE,
        )


class MalformedTokenError(AuthError):
    """Credential cannot be parsed into a claim set."""

    def __init__(self, reason: str = "Credential is malformed") -> None:
        super().__init__(message=reason, error_code=ErrorCode.MALFORMED_TOKEN)


class TokenExpiredError(AuthError):
    """Credential is past its expiry. The caller should log in again."""

    def __init__(self) -> None:
        super().__init__(
            message="Credential has expired, please log in again",
            error_code=ErrorCode.TOKEN_EXPIRED,
        )


class AuthorizationError(AppException):
    """Caller is authenticated but may not act on the resource."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=403,
        )


# --- Identity providers ---


class ProviderError(AppException):
    """Base class for provider exchange failures."""


class ProviderRejectedError(ProviderError):
    """Provider denied or expired the exchange. Not retryable."""

    def __init__(self, provider: str, reason: str = "Provider rejected the login") -> None:
        super().__init__(
            error_code=ErrorCode.PROVIDER_REJECTED,
            message=reason,
            status_code=401,
            details={"provider": provider},
        )


class ProviderUnreachableError(ProviderError):
    """Provider could not be reached. The client may retry."""

    retryable = True

    def __init__(self, provider: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROVIDER_UNREACHABLE,
            message=f"Identity provider '{provider}' is unreachable, please retry",
            status_code=503,
            details={"provider": provider},
        )


class UnknownProviderError(ProviderError):
    """Provider name is not registered or not configured."""

    def __init__(self, provider: str) -> None:
        super().__init__(
            error_code=ErrorCode.UNKNOWN_PROVIDER,
            message=f"Login provider not available: {provider}",
            status_code=404,
            details={"provider": provider},
        )


# --- Profiles ---


class ProfileError(AppException):
    """Base class for profile store and reconciliation failures."""


class ProfileNotFoundError(ProfileError):
    """Profile not found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_NOT_FOUND,
            message=f"Profile not found: {user_id}",
            status_code=404,
            details={"user_id": user_id},
        )


class IrreconcilableProfileError(ProfileError):
    """Role record lacks the fields needed to synthesize a unified profile."""

    def __init__(self, user_id: str, missing: list[str]) -> None:
        super().__init__(
            error_code=ErrorCode.IRRECONCILABLE_PROFILE,
            message=f"Cannot build a unified profile for {user_id}",
            status_code=422,
            details={"user_id": user_id, "missing_fields": missing},
        )


class ProfileMismatchError(ProfileError):
    """Role record and unified profile disagree on a key field."""

    def __init__(self, user_id: str, conflicts: dict[str, dict[str, Any]]) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_MISMATCH,
            message=f"Profile records disagree for {user_id}",
            status_code=409,
            details={"user_id": user_id, "conflicts": conflicts},
        )


class ConcurrencyConflictError(ProfileError):
    """Profile changed since it was read. Re-read and re-apply."""

    retryable = True

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.CONCURRENCY_CONFLICT,
            message="Profile was modified concurrently, please retry",
            status_code=409,
            details={"user_id": user_id},
        )


# --- Uploads ---


class UploadError(AppException):
    """Base class for asset upload failures."""


class UnsupportedMediaTypeError(UploadError):
    """Uploaded asset is not an image."""

    def __init__(self, content_type: str | None) -> None:
        super().__init__(
            error_code=ErrorCode.UNSUPPORTED_MEDIA_TYPE,
            message="Only image files are allowed",
            status_code=415,
            details={"content_type": content_type},
        )


class PayloadTooLargeError(UploadError):
    """Uploaded asset exceeds the size ceiling."""

    def __init__(self, max_bytes: int) -> None:
        super().__init__(
            error_code=ErrorCode.PAYLOAD_TOO_LARGE,
            message=f"File exceeds the {max_bytes} byte limit",
            status_code=413,
            details={"max_bytes": max_bytes},
        )


class StorageFailureError(UploadError):
    """Asset storage could not persist the upload."""

    def __init__(self, message: str = "Could not store the uploaded file") -> None:
        super().__init__(
            error_code=ErrorCode.STORAGE_FAILURE,
            message=message,
            status_code=500,
        )
