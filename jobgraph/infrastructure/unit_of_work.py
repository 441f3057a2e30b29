# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from sqlalchemy.orm import Session

from jobgraph.shared.logging import logger


@contextmanager
def unit_of_work_scope(factory: Callable[[], Session]) -> Iterator[Session]:
    """One transaction per repository call: commit on success, roll back on error.

    Rows are converted to domain entities inside the block, so nothing reads
    an ORM instance after its session is closed.
    """
    session = factory()
    try:
        yield session
        session.commit()
    except BaseException as exc:
        logger.debug(f"uow: rollback after {type(exc).__name__}")
        session.rollback()
        raise
    finally:
        session.close()


__all__ = ["unit_of_work_scope"]
