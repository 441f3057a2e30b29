# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from enum import StrEnum


class ValidationErrorType(StrEnum):
    MISSING = "missing"
    EMAIL_INVALID = "email_invalid"
    PASSWORD_WEAK = "password_weak"
    ROLE_INVALID = "role_invalid"
    NAME_INVALID = "name_invalid"


ERROR_CODE_BY_TYPE: dict[str, str] = {
    ValidationErrorType.EMAIL_INVALID: "INVALID_EMAIL",
    ValidationErrorType.PASSWORD_WEAK: "WEAK_PASSWORD",
    ValidationErrorType.ROLE_INVALID: "INVALID_ROLE",
}

__all__ = ["ERROR_CODE_BY_TYPE", "ValidationErrorType"]
