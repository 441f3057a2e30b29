"""loguru configuration shared by the API process and the test suite.

Every record carries the request correlation id and the authenticated user id
(``-`` outside a request). Both live in context variables so worker threads
serving different requests never see each other's values.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger as _loguru

from .sensitive_filter import sanitize_record

if TYPE_CHECKING:
    from jobgraph.shared.config import ObservabilityConfig

_LINE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<lvl>{level:<8}</lvl> | "
    "{extra[service]} | "
    "<magenta>{extra[correlation_id]}</magenta> "
    "<yellow>user={extra[user_id]}</yellow> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<lvl>{message}</lvl>"
)

_DEFAULT_LOG_FILE = Path(__file__).resolve().parents[2] / "instance" / "jobgraph.log"

_correlation_id: ContextVar[str] = ContextVar("jobgraph_correlation_id", default="-")
_user_id: ContextVar[str] = ContextVar("jobgraph_user_id", default="-")


def _context() -> dict[str, str]:
    return {"correlation_id": _correlation_id.get(), "user_id": _user_id.get()}


class _StdlibBridge(logging.Handler):
    """Forwards werkzeug and SQLAlchemy records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = _loguru.level(record.levelname).name
        except ValueError:
            level = record.levelno
        _loguru.bind(**_context()).opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


class ContextualLogger:
    """loguru proxy that binds the current request context on every call."""

    def __getattr__(self, name):  # pragma: no cover
        return getattr(_loguru.bind(**_context()), name)


def set_correlation_id(value: str | None) -> None:
    _correlation_id.set(value or "-")


def get_correlation_id() -> str:
    return _correlation_id.get()


def bind_user(user_id: int | None) -> None:
    _user_id.set("-" if user_id is None else str(user_id))


def clear_correlation_id() -> None:
    _correlation_id.set("-")
    _user_id.set("-")


def setup_logging(config: ObservabilityConfig, *, debug_mode: bool = False) -> None:
    level = "DEBUG" if debug_mode else config.log_level.upper()
    log_file = Path(config.log_file) if config.log_file else _DEFAULT_LOG_FILE
    log_file.parent.mkdir(parents=True, exist_ok=True)

    _loguru.remove()
    _loguru.configure(extra={"service": config.service_name, "correlation_id": "-", "user_id": "-"})
    common = {"level": level, "format": _LINE_FORMAT, "backtrace": False, "diagnose": False, "filter": sanitize_record}
    _loguru.add(sys.stderr, colorize=True, **common)
    _loguru.add(str(log_file), colorize=False, enqueue=True, encoding="utf-8", rotation="20 MB", **common)

    logging.basicConfig(handlers=[_StdlibBridge()], level=0, force=True)
    for noisy in ("werkzeug", "sqlalchemy.engine", "sqlalchemy.pool"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


logger = ContextualLogger()

__all__ = [
    "bind_user",
    "clear_correlation_id",
    "get_correlation_id",
    "logger",
    "set_correlation_id",
    "setup_logging",
]
