# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from threading import RLock

from jobgraph.shared.logging import logger

DEFAULT_ATTEMPT_WINDOW = 60 * 60  # 1 hour in seconds


@dataclass
class LoginAttempt:
    timestamp: float
    ip_address: str | None = None


class LoginAttemptsTracker:
    """In-process failed-login counter keyed by lower-cased email.

    Only failures inside ``attempt_window`` are kept. Histories that age out
    and lockouts that expire are swept at most once per window.
    """

    def __init__(
        self,
        *,
        max_attempts: int = 5,
        lockout_seconds: float = 15 * 60,
        attempt_window: float = DEFAULT_ATTEMPT_WINDOW,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds
        self.attempt_window = attempt_window
        self._clock = clock
        self._failures: dict[str, deque[LoginAttempt]] = {}
        self._lockouts: dict[str, float] = {}  # email -> unlock_time
        self._lock = RLock()
        self._last_sweep = clock()

    def record_attempt(self, email: str, success: bool, ip_address: str | None = None) -> None:
        with self._lock:
            now = self._clock()
            self._maybe_sweep(now)
            if success:
                self._failures.pop(email, None)
                if self._lockouts.pop(email, None) is not None:
                    logger.info("login_attempts: cleared lockout after successful login")
                return

            failures = self._failures.setdefault(email, deque(maxlen=self.max_attempts))
            failures.append(LoginAttempt(timestamp=now, ip_address=ip_address))
            self._check_and_lock(email, failures, now)

    def is_locked(self, email: str) -> bool:
        with self._lock:
            unlock_time = self._lockouts.get(email)
            if unlock_time is None:
                return False
            if self._clock() >= unlock_time:
                del self._lockouts[email]
                logger.info("login_attempts: lockout expired")
                return False
            return True

    def get_lockout_remaining(self, email: str) -> float:
        with self._lock:
            if email not in self._lockouts:
                return 0.0
            return max(0.0, self._lockouts[email] - self._clock())

    def tracked_emails(self) -> int:
        with self._lock:
            return len(self._failures.keys() | self._lockouts.keys())

    def _check_and_lock(self, email: str, failures: deque[LoginAttempt], now: float) -> None:
        cutoff = now - self.attempt_window
        recent = [attempt for attempt in failures if attempt.timestamp > cutoff]
        if len(recent) < self.max_attempts:
            return
        self._lockouts[email] = now + self.lockout_seconds
        del self._failures[email]
        ips = {attempt.ip_address for attempt in recent if attempt.ip_address}
        # Email is masked by the log sanitizer.
        logger.warning(
            f"login_attempts: ACCOUNT LOCKED email={email} "
            f"failed_attempts={len(recent)} "
            f"lockout_duration={self.lockout_seconds}s "
            f"ip_addresses={sorted(ips) if ips else 'unknown'}"
        )

    def _maybe_sweep(self, now: float) -> None:
        if now - self._last_sweep < self.attempt_window:
            return
        cutoff = now - self.attempt_window
        for email in list(self._failures):
            if self._failures[email][-1].timestamp <= cutoff:
                del self._failures[email]
        for email in [e for e, unlock_time in self._lockouts.items() if unlock_time <= now]:
            del self._lockouts[email]
        self._last_sweep = now


__all__ = ["LoginAttempt", "LoginAttemptsTracker"]
