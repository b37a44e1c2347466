"""Error types shared across the client."""

from __future__ import annotations


class ColivingError(Exception):
    """Base class for every error the client raises."""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ColivingErrorCodes:
    """ColivingError code constants."""

    NETWORK_ERROR: str = "NETWORK_ERROR"
    HTTP_ERROR: str = "HTTP_ERROR"
    UNAUTHORIZED: str = "UNAUTHORIZED"
    NOT_FOUND: str = "NOT_FOUND"
    DECODE_ERROR: str = "DECODE_ERROR"
    VALIDATION_ERROR: str = "VALIDATION_ERROR"
    STORAGE_UNAVAILABLE: str = "STORAGE_UNAVAILABLE"
    CANCELLED: str = "CANCELLED"
    ACCOUNT_NOT_FOUND: str = "ACCOUNT_NOT_FOUND"


class ApiError(ColivingError):
    """The backend answered with an HTTP error status.

    ``message`` is the backend's human-readable ``message`` field when one
    was sent; ``errors`` collects ``errors[].message`` from validation
    failures.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int,
        errors: list[str] | None = None,
    ) -> None:
        super().__init__(code, message)
        self.status_code = status_code
        self.errors = errors or []


class AccountNotFound(ApiError):
    """Login OTP was requested for an email with no account."""


class StorageUnavailable(ColivingError):
    """A storage tier cannot be used on this machine."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(ColivingErrorCodes.STORAGE_UNAVAILABLE, message, cause)
