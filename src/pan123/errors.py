"""Error taxonomy for the 123pan open API client."""

from __future__ import annotations

from typing import Any


class Pan123Error(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(Pan123Error):
    """Missing credentials or invalid client tuning."""


class AuthError(Pan123Error):
    """Access token could not be obtained or was rejected twice."""

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details


class RateLimitError(Pan123Error):
    """Local token-bucket admission gave up."""

    def __init__(self, max_retries: int) -> None:
        super().__init__(f"Rate limit exceeded. Max retries ({max_retries}) reached.")
        self.max_retries = max_retries


class ApiError(Pan123Error):
    """Non-zero business code, non-2xx response, or a translated transport failure.

    ``code`` is the vendor's envelope code when the server supplied one, the
    HTTP status otherwise, and ``-1`` when no response was received at all.
    """

    def __init__(
        self,
        code: int,
        message: str,
        *,
        details: Any = None,
        trace_id: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details
        self.trace_id = trace_id
        self.status_code = status_code

    def __str__(self) -> str:
        text = f"[{self.code}] {self.message}"
        if self.trace_id:
            text += f" (trace: {self.trace_id})"
        return text


class UploadError(ApiError):
    """One step of an upload failed; ``step`` names which one."""

    def __init__(
        self,
        step: str,
        message: str,
        *,
        code: int = -1,
        details: Any = None,
        trace_id: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(code, message, details=details, trace_id=trace_id, status_code=status_code)
        self.step = step

    @classmethod
    def from_error(cls, step: str, error: Pan123Error) -> UploadError:
        """Wrap any package error raised while running ``step``."""
        if isinstance(error, ApiError):
            return cls(
                step,
                f"{step} failed: {error.message}",
                code=error.code,
                details=error.details,
                trace_id=error.trace_id,
                status_code=error.status_code,
            )
        if isinstance(error, AuthError):
            return cls(
                step,
                f"{step} failed: {error.message}",
                code=error.code if error.code is not None else -1,
                details=error.details,
            )
        return cls(step, f"{step} failed: {error}")


__all__ = [
    "Pan123Error",
    "ConfigurationError",
    "AuthError",
    "RateLimitError",
    "ApiError",
    "UploadError",
]
