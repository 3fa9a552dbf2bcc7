"""
Error taxonomy for the Twitter client.

所有错误都带有一个稳定的错误码，便于日志检索和上层判断。
"""

from enum import Enum
from typing import Any


class TwitterErrorCode(str, Enum):
    CONFIG_INVALID = "config_invalid"
    AUTHENTICATION_FAILED = "authentication_failed"
    SESSION_UNAVAILABLE = "session_unavailable"
    UNKNOWN = "unknown"


class TwitterClientError(Exception):
    """Base error raised by the Twitter client package."""

    code: TwitterErrorCode = TwitterErrorCode.UNKNOWN

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class ConfigValidationError(TwitterClientError):
    """
    Configuration failed semantic validation.

    Carries the flattened pydantic error list so the facade can log it
    without re-parsing the original exception.
    """

    code = TwitterErrorCode.CONFIG_INVALID

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause=cause)
        self.errors = errors or []

    @property
    def fields(self) -> list[str]:
        """Names of the offending settings."""
        return [".".join(str(part) for part in err.get("loc", ())) for err in self.errors]


class AuthenticationFailure(TwitterClientError):
    """Login attempt failed or raised."""

    code = TwitterErrorCode.AUTHENTICATION_FAILED


class SessionUnavailable(TwitterClientError):
    """An operation needed the session handle before it existed."""

    code = TwitterErrorCode.SESSION_UNAVAILABLE
