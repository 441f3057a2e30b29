# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, cast


@dataclass(eq=False)
class AppError(Exception):
    code: str
    status: HTTPStatus
    message: str = ""
    details: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message or self.code)

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            error["details"] = dict(self.details)
        return {"success": False, "error": error}


class DomainError(AppError):
    """Business rule failure; subclasses declare ``code``, ``status`` and ``message``."""

    def __init__(
        self,
        message: str | None = None,
        *,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        cls = type(self)
        resolved_code = cast(str, getattr(cls, "code", "DOMAIN_ERROR"))
        resolved_status = cast(HTTPStatus, getattr(cls, "status", HTTPStatus.BAD_REQUEST))
        resolved_message = message or cast(str, getattr(cls, "message", "")) or resolved_code
        super().__init__(
            code=resolved_code,
            status=resolved_status,
            message=resolved_message,
            details=details,
        )


class InfrastructureError(AppError):
    def __init__(
        self,
        code: str = "INTERNAL_ERROR",
        *,
        message: str = "An internal error occurred",
        status: HTTPStatus | None = None,
    ) -> None:
        resolved_status = status or HTTPStatus.INTERNAL_SERVER_ERROR
        super().__init__(code=code, status=resolved_status, message=message)


class InternalError(InfrastructureError):
    """Server-side fault: storage unavailable, timeout or an unexpected exception."""

    def __init__(self, message: str = "An internal error occurred") -> None:
        super().__init__("INTERNAL_ERROR", message=message)


class ValidationError(AppError):
    def __init__(
        self,
        code: str = "VALIDATION_ERROR",
        *,
        message: str = "Request validation failed",
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code=code,
            status=HTTPStatus.BAD_REQUEST,
            message=message,
            details=details,
        )


class RateLimitedError(AppError):
    def __init__(self, retry_after: float) -> None:
        super().__init__(
            code="RATE_LIMITED",
            status=HTTPStatus.TOO_MANY_REQUESTS,
            message="Too many requests, slow down",
            details={"retry_after_seconds": round(retry_after, 1)},
        )
