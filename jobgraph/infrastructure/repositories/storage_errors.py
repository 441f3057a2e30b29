# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Shared helpers for SQLAlchemy-backed repositories."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from functools import wraps
from typing import ParamSpec, TypeVar, overload

from sqlalchemy.exc import SQLAlchemyError

from jobgraph.shared.errors import InternalError
from jobgraph.shared.logging import logger

P = ParamSpec("P")
R = TypeVar("R")


def storage_errors(func: Callable[P, R]) -> Callable[P, R]:
    """Surface driver, pool and lock-timeout failures as ``InternalError``."""

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as exc:
            logger.error(f"storage: {func.__qualname__} failed: {type(exc).__name__}")
            raise InternalError("Storage is temporarily unavailable") from exc

    return wrapper


@overload
def as_utc(value: datetime) -> datetime: ...
@overload
def as_utc(value: None) -> None: ...
def as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


__all__ = ["as_utc", "storage_errors"]
