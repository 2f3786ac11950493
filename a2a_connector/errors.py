# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Connector error code system.

Standardized error codes and exception classes for the A2A connector.
Startup errors (config, compile) are fatal; per-call errors carry an HTTP
status so the proxy can surface them to the calling agent.

Error Response Schema:
```json
{
  "error": {
    "code": "NO_MATCHING_INTENT",
    "message": "No mapping matches the task text",
    "details": {"text": "what is the weather"},
    "suggestion": "Add a mapping whose intentPattern matches this request"
  }
}
```
"""

from enum import Enum
from typing import Any


class ConnectorErrorCode(str, Enum):
    """Standard connector error codes.

    Each code maps to a specific HTTP status and has a default suggestion.
    """

    # Startup (fatal)
    CONFIG_ERROR = "CONFIG_ERROR"
    COMPILE_ERROR = "COMPILE_ERROR"

    # 400 Bad Request
    INVALID_PAYLOAD = "INVALID_PAYLOAD"

    # 422 Unprocessable Entity
    NO_MATCHING_INTENT = "NO_MATCHING_INTENT"

    # 500 Internal Server Error
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # 502 Bad Gateway
    RESPONSE_TRANSFORM_FAILED = "RESPONSE_TRANSFORM_FAILED"
    BACKEND_ERROR = "BACKEND_ERROR"

    # 504 Gateway Timeout
    BACKEND_TIMEOUT = "BACKEND_TIMEOUT"


# HTTP status code mapping
ERROR_CODE_TO_HTTP_STATUS: dict[ConnectorErrorCode, int] = {
    ConnectorErrorCode.CONFIG_ERROR: 500,
    ConnectorErrorCode.COMPILE_ERROR: 500,
    ConnectorErrorCode.INVALID_PAYLOAD: 400,
    ConnectorErrorCode.NO_MATCHING_INTENT: 422,
    ConnectorErrorCode.INTERNAL_ERROR: 500,
    ConnectorErrorCode.RESPONSE_TRANSFORM_FAILED: 502,
    ConnectorErrorCode.BACKEND_ERROR: 502,
    ConnectorErrorCode.BACKEND_TIMEOUT: 504,
}


ERROR_CODE_SUGGESTIONS: dict[ConnectorErrorCode, str] = {
    ConnectorErrorCode.CONFIG_ERROR: "Fix the connector configuration file and restart",
    ConnectorErrorCode.COMPILE_ERROR: "Fix the pattern or template named in details and restart",
    ConnectorErrorCode.INVALID_PAYLOAD: "Send a JSON task with status.message.parts",
    ConnectorErrorCode.NO_MATCHING_INTENT: "Add a mapping whose intentPattern matches this request",
    ConnectorErrorCode.INTERNAL_ERROR: "Retry the request; if persistent, check connector logs",
    ConnectorErrorCode.RESPONSE_TRANSFORM_FAILED: "The legacy system returned a payload that could not be mapped back to a task",
    ConnectorErrorCode.BACKEND_ERROR: "The legacy system could not be reached; check adapter.baseUrl",
    ConnectorErrorCode.BACKEND_TIMEOUT: "The legacy system took too long; retry or raise the upstream timeout",
}


class ConnectorError(Exception):
    """Base exception for connector errors.

    Usage:
        raise ConnectorError(
            code=ConnectorErrorCode.INVALID_PAYLOAD,
            message="Request body is not valid JSON",
            details={"position": 12},
        )
    """

    def __init__(
        self,
        code: ConnectorErrorCode | str,
        message: str,
        details: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        self.code = code if isinstance(code, ConnectorErrorCode) else ConnectorErrorCode(code)
        self.message = message
        self.details = details
        self.suggestion = suggestion or ERROR_CODE_SUGGESTIONS.get(self.code)
        super().__init__(message)

    @property
    def http_status(self) -> int:
        """Get HTTP status code for this error."""
        return ERROR_CODE_TO_HTTP_STATUS.get(self.code, 500)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
                "suggestion": self.suggestion,
            }
        }


# =============================================================================
# Startup Errors (fatal)
# =============================================================================


class ConfigError(ConnectorError):
    """Raised when the connector configuration is malformed or incomplete."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            code=ConnectorErrorCode.CONFIG_ERROR,
            message=message,
            details=details,
        )


class CompileError(ConnectorError):
    """Raised when a regex or template in the configuration fails to compile."""

    def __init__(
        self,
        location: str,
        source: str,
        reason: str,
    ):
        super().__init__(
            code=ConnectorErrorCode.COMPILE_ERROR,
            message=f"Failed to compile {location}: {reason}",
            details={"location": location, "source": source, "reason": reason},
        )
        self.location = location


# =============================================================================
# Per-call Errors (recoverable)
# =============================================================================


class NoMatchError(ConnectorError):
    """Raised when no intent mapping matches the task text."""

    def __init__(self, text: str):
        super().__init__(
            code=ConnectorErrorCode.NO_MATCHING_INTENT,
            message="No mapping matches the task text",
            details={"text": text},
        )
        self.text = text


class MarshalError(ConnectorError):
    """Raised when a payload is not valid JSON or lacks the expected shape."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            code=ConnectorErrorCode.INVALID_PAYLOAD,
            message=message,
            details=details,
        )


class ResponseTransformError(ConnectorError):
    """Raised when a legacy response cannot be turned back into a task."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            code=ConnectorErrorCode.RESPONSE_TRANSFORM_FAILED,
            message=message,
            details=details,
        )


class BackendError(ConnectorError):
    """Raised when the legacy system cannot be reached."""

    def __init__(
        self,
        backend: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        error_details = details or {}
        error_details["backend"] = backend
        super().__init__(
            code=ConnectorErrorCode.BACKEND_ERROR,
            message=message or f"Backend '{backend}' request failed",
            details=error_details,
        )


class BackendTimeoutError(ConnectorError):
    """Raised when the legacy system does not answer in time."""

    def __init__(
        self,
        backend: str,
        timeout_seconds: float | None = None,
    ):
        details: dict[str, Any] = {"backend": backend}
        if timeout_seconds is not None:
            details["timeout_seconds"] = timeout_seconds
        super().__init__(
            code=ConnectorErrorCode.BACKEND_TIMEOUT,
            message=f"Backend '{backend}' timed out",
            details=details,
        )
