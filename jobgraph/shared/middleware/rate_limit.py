# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable
from functools import wraps
from threading import Lock

from flask import Request, request

from jobgraph.shared.config import load_config
from jobgraph.shared.errors import RateLimitedError


class InMemoryRateLimiter:
    """Sliding-window counter per key.

    Keys whose hits have all aged out of the window are dropped, so the table
    only holds clients seen during the last window.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._limit = max(1, int(limit))
        self._window = max(0.1, float(window_seconds))
        self._clock = clock
        self._lock = Lock()
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = clock()

    def allow(self, key: str) -> float:
        """Record a hit for ``key``; return 0 when allowed, else seconds until retry."""
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self._window:
                self._sweep(now)
            hits = self._hits.get(key)
            if hits is None:
                hits = self._hits[key] = deque(maxlen=self._limit)
            self._expire(hits, now)
            if len(hits) >= self._limit:
                return max(0.1, self._window - (now - hits[0]))
            hits.append(now)
            return 0.0

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._hits)

    def _expire(self, hits: deque[float], now: float) -> None:
        while hits and (now - hits[0]) > self._window:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        for key in list(self._hits):
            hits = self._hits[key]
            self._expire(hits, now)
            if not hits:
                del self._hits[key]
        self._last_sweep = now


def client_ip(req: Request) -> str:
    # X-Forwarded-For is only honoured through ProxyFix, installed when TRUSTED_PROXY_COUNT > 0.
    return req.remote_addr or "unknown"


def rate_limit(limit: int | None = None, window_seconds: float | None = None):
    config = load_config()
    enabled = config.security.enable_rate_limit
    limiter = InMemoryRateLimiter(
        limit or config.security.rate_limit_requests,
        window_seconds or config.security.rate_limit_window,
    )

    def decorator(f: Callable):
        if not enabled:
            return f

        @wraps(f)
        def wrapper(*args, **kwargs):
            retry_after = limiter.allow(f"{request.path}:{client_ip(request)}")
            if retry_after:
                raise RateLimitedError(retry_after)
            return f(*args, **kwargs)

        return wrapper

    return decorator


__all__ = ["InMemoryRateLimiter", "client_ip", "rate_limit"]
