"""
UplinxError — the single error type raised by the SDK.

Every failure (HTTP error, network failure, timeout, malformed response)
reaches the caller as an UplinxError carrying a message, a numeric status
(0 when no HTTP response was involved), a string code and optional details.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any

import httpx
from pydantic import ValidationError

from uplinx.models import ApiError


class ErrorCode(str, Enum):
    """Codes generated by the SDK itself (servers may send others)."""

    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    STREAM_ERROR = "STREAM_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class UplinxError(Exception):
    """An API or transport failure, normalized."""

    def __init__(
        self,
        message: str,
        status: int,
        code: str,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.details = details

    def __repr__(self) -> str:
        return (
            f"UplinxError(message={self.message!r}, status={self.status}, "
            f"code={self.code!r})"
        )

    @classmethod
    def from_response(cls, status: int, body: Any) -> UplinxError:
        """Build an error from an HTTP error status and its (parsed) body.

        Accepts both ``{"error": "msg", "code": ..., "details": ...}`` and the
        nested ``{"error": {"message": ..., "code": ...}}`` envelope.
        """
        if isinstance(body, dict) and "error" in body:
            try:
                parsed = ApiError.model_validate(body)
            except ValidationError:
                pass
            else:
                return cls(
                    parsed.error,
                    status,
                    parsed.code or ErrorCode.UNKNOWN_ERROR.value,
                    parsed.details,
                )

            error = body["error"]
            code = body.get("code")
            details = body.get("details")
            if isinstance(error, dict):
                message = str(error.get("message", "An unknown error occurred"))
                if code is None:
                    code = error.get("code")
                if details is None:
                    details = error.get("details")
            else:
                message = str(error)
            if code is None or code == "":
                code = ErrorCode.UNKNOWN_ERROR.value
            return cls(message, status, str(code), details)
        return cls(
            "An unknown error occurred", status, ErrorCode.UNKNOWN_ERROR.value, body
        )

    @classmethod
    def from_exception(cls, error: BaseException) -> UplinxError:
        """Classify an exception raised while talking to the API."""
        if isinstance(error, UplinxError):
            return error
        if isinstance(error, (asyncio.TimeoutError, httpx.TimeoutException)):
            return cls.timeout_error()
        if cls.is_network_error(error):
            return cls.network_error(error)
        return cls(str(error) or "Unknown error", 0, ErrorCode.UNKNOWN_ERROR.value)

    @staticmethod
    def is_network_error(error: BaseException) -> bool:
        """True when the transport could not complete the exchange (not a timeout)."""
        return isinstance(error, httpx.TransportError) and not isinstance(
            error, httpx.TimeoutException
        )

    @classmethod
    def network_error(cls, original: BaseException) -> UplinxError:
        return cls(
            f"Network error: {original}",
            0,
            ErrorCode.NETWORK_ERROR.value,
            {"originalError": str(original)},
        )

    @classmethod
    def timeout_error(cls) -> UplinxError:
        return cls("Request timed out", 408, ErrorCode.TIMEOUT_ERROR.value)

    @classmethod
    def validation_error(cls, issues: list[Any]) -> UplinxError:
        """The server answered 2xx but the body does not match the declared shape."""
        return cls(
            "Invalid response from server",
            500,
            ErrorCode.VALIDATION_ERROR.value,
            issues,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": type(self).__name__,
            "message": self.message,
            "status": self.status,
            "code": self.code,
            "details": self.details,
        }
