from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    CYCLE_NOT_FOUND = "CYCLE_NOT_FOUND"
    REGISTRY_REQUEST_FAILED = "REGISTRY_REQUEST_FAILED"
    REGISTRY_UNREACHABLE = "REGISTRY_UNREACHABLE"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    INVALID_INPUT = "INVALID_INPUT"


class LifecycleTrackerError(Exception):
    """Base class for all expected failure conditions.

    Carries a machine-readable code and a suggestion so callers can render
    actionable diagnostics without parsing the message.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }


class RegistryApiError(LifecycleTrackerError):
    """Raised when the lifecycle registry cannot be reached or answers non-2xx.

    ``status_code`` is ``None`` for transport failures (DNS, refused
    connection, timeout). ``product`` and ``cycle`` identify the request that
    failed.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        *,
        status_code: int | None = None,
        product: str | None = None,
        cycle: str | None = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(code, message, suggestion, recoverable)
        self.status_code = status_code
        self.product = product
        self.cycle = cycle

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["error"].update(
            {
                "status_code": self.status_code,
                "product": self.product,
                "cycle": self.cycle,
            }
        )
        return payload


class ValidationError(LifecycleTrackerError):
    """Raised for malformed inputs or configuration, before any network call."""

    def __init__(
        self,
        message: str,
        suggestion: str,
        *,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(ErrorCode.INVALID_INPUT, message, suggestion, recoverable=False)
        self.errors = errors or []
