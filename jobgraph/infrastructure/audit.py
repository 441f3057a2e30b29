# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Security audit trail for authentication and role-gated actions."""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobgraph.infrastructure.db.models import AuditLog
from jobgraph.infrastructure.unit_of_work import unit_of_work_scope
from jobgraph.shared.logging import get_correlation_id, logger, sanitize_message


class AuditAction(str, Enum):
    # Authentication
    REGISTER = "register"
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGIN_LOCKED = "login_locked"
    LOGOUT = "logout"
    TOKEN_REFRESHED = "token_refreshed"
    TOKEN_REFRESH_FAILED = "token_refresh_failed"
    EMAIL_VERIFIED = "email_verified"
    PASSWORD_CHANGED = "password_changed"
    EMAIL_CHANGED = "email_changed"
    ACCOUNT_DELETED = "account_deleted"

    # Authorization
    ACCESS_FORBIDDEN = "access_forbidden"

    # Jobs
    JOB_CREATED = "job_created"
    JOB_APPLIED = "job_applied"


_REDACTED = "***REDACTED***"
_SECRET_KEY_MARKERS = ("password", "token", "secret", "authorization")
_DETAILS_LIMIT = 2048


def _utc_now() -> datetime:
    return datetime.now(UTC)


def redact_details(details: Mapping[str, Any]) -> dict[str, Any]:
    """Hide secret-named keys and mask e-mails and tokens inside string values."""
    redacted: dict[str, Any] = {}
    for key, value in details.items():
        if any(marker in key.lower() for marker in _SECRET_KEY_MARKERS):
            redacted[key] = _REDACTED
        elif isinstance(value, str):
            redacted[key] = sanitize_message(value)
        else:
            redacted[key] = value
    return redacted


@dataclass(frozen=True)
class AuditEntry:
    action: AuditAction
    success: bool
    user_id: int | None = None
    ip_address: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    correlation_id: str = "-"
    timestamp: datetime = field(default_factory=_utc_now)

    def summary(self) -> str:
        line = f"audit: {self.action.value} success={self.success} user={self.user_id} ip={self.ip_address}"
        if self.details:
            line += f" details={self.details}"
        return line

    def details_json(self) -> str | None:
        if not self.details:
            return None
        return json.dumps(self.details, default=str)[:_DETAILS_LIMIT]


class AuditTrail:
    """Writes audit events to the log and to ``audit_logs``.

    Storage is best effort: a database failure is logged and swallowed so an
    unavailable audit table never turns a served request into an error.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    def record(
        self,
        action: AuditAction,
        user_id: int | None = None,
        ip_address: str | None = None,
        details: Mapping[str, Any] | None = None,
        success: bool = True,
    ) -> AuditEntry:
        entry = AuditEntry(
            action=action,
            success=success,
            user_id=user_id,
            ip_address=ip_address,
            details=redact_details(details or {}),
            correlation_id=get_correlation_id(),
            timestamp=self._clock(),
        )
        if success:
            logger.info(entry.summary())
        else:
            logger.warning(entry.summary())

        try:
            self._store(entry)
        except SQLAlchemyError as exc:
            logger.warning(f"audit: could not store {action.value} event: {type(exc).__name__}")
        return entry

    def _store(self, entry: AuditEntry) -> None:
        with unit_of_work_scope(self._session_factory) as session:
            session.add(
                AuditLog(
                    timestamp=entry.timestamp,
                    action=entry.action.value,
                    user_id=entry.user_id,
                    ip_address=entry.ip_address,
                    success=entry.success,
                    correlation_id=entry.correlation_id,
                    details_json=entry.details_json(),
                )
            )


__all__ = ["AuditAction", "AuditEntry", "AuditTrail", "redact_details"]
