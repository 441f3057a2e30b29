# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any, NoReturn

from pydantic import ValidationError as PydanticValidationError

from .base import ValidationError
from .validation_types import ERROR_CODE_BY_TYPE


def format_pydantic_errors(exc: PydanticValidationError) -> dict[str, Any]:
    errors_list = []
    fields_set = set()

    for error in exc.errors():
        loc = error.get("loc", ())
        field_path = ".".join(str(part) for part in loc if part is not None)

        if field_path:
            fields_set.add(field_path)

        error_entry = {
            "field": field_path or "unknown",
            "type": error.get("type", "value_error"),
            "message": error.get("msg", ""),
        }

        errors_list.append(error_entry)

    return {
        "fields": sorted(fields_set),
        "errors": errors_list,
    }


def raise_validation_error(exc: PydanticValidationError) -> NoReturn:
    context = format_pydantic_errors(exc)
    # A single specific failure (bad email, weak password) keeps its own code.
    code = "VALIDATION_ERROR"
    message = "Request validation failed"
    if len(context["errors"]) == 1:
        only = context["errors"][0]
        if only["type"] in ERROR_CODE_BY_TYPE:
            code = ERROR_CODE_BY_TYPE[only["type"]]
            message = only["message"]
    raise ValidationError(code, message=message, details=context) from exc


__all__ = [
    "format_pydantic_errors",
    "raise_validation_error",
]
