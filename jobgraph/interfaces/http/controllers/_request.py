# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import TypeVar

from flask import request
from pydantic import BaseModel, ValidationError

from jobgraph.domain.users.entities import ClientContext
from jobgraph.shared.errors.validation import raise_validation_error
from jobgraph.shared.middleware.rate_limit import client_ip

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_body(model: type[ModelT]) -> ModelT:
    try:
        return model.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        raise_validation_error(exc)


def parse_query(model: type[ModelT]) -> ModelT:
    try:
        return model.model_validate(request.args.to_dict())
    except ValidationError as exc:
        raise_validation_error(exc)


def client_context() -> ClientContext:
    user_agent = request.headers.get("User-Agent")
    return ClientContext(
        user_agent=user_agent[:512] if user_agent else None,
        ip_address=client_ip(request),
    )
