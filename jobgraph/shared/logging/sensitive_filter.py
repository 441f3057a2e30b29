# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Redaction applied to every log record before it reaches a sink."""

from __future__ import annotations

import re
from typing import Any

_MASK = "***REDACTED***"

# Order matters: specific credential shapes first, the e-mail mask last.
_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(authorization\s*[:=]\s*['\"]?)[^'\"\n]{8,}", re.IGNORECASE), rf"\1{_MASK}"),
    (re.compile(r"(bearer\s+)[\w\-.]{16,}", re.IGNORECASE), rf"\1{_MASK}"),
    (re.compile(r"\beyJ[\w\-]+\.[\w\-]+\.[\w\-]+"), "***JWT***"),
    (
        re.compile(
            r"((?:refresh|access|verification)[_-]?token['\"]?\s*[:=]\s*['\"]?)[\w\-.]{16,}",
            re.IGNORECASE,
        ),
        rf"\1{_MASK}",
    ),
    # Opaque refresh (128 hex) and verification (64 hex) tokens without a label.
    (re.compile(r"\b[0-9a-f]{64}(?:[0-9a-f]{64})?\b"), "***TOKEN***"),
    (
        re.compile(r"((?:current|new)?password['\"]?\s*[:=]\s*['\"]?)[^'\"\s,}]+", re.IGNORECASE),
        rf"\1{_MASK}",
    ),
    (re.compile(r"((?:secret[_-]?key|jwt[_-]?secret)\s*[:=]\s*['\"]?)[^'\"\s]+", re.IGNORECASE), rf"\1{_MASK}"),
    (re.compile(r"(\w+(?:\+\w+)?://[^:/@\s]+:)[^@\s]+@"), rf"\1{_MASK}@"),
    (re.compile(r"[\w.%+-]+@([\w-]+(?:\.[\w-]+)*\.[a-zA-Z]{2,})"), r"***@\1"),
]


def sanitize_message(message: str) -> str:
    for pattern, replacement in _RULES:
        message = pattern.sub(replacement, message)
    return message


def sanitize_record(record: dict[str, Any]) -> bool:
    record["message"] = sanitize_message(record["message"])
    return True


__all__ = ["sanitize_message", "sanitize_record"]
