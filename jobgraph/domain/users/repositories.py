# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from .entities import RefreshToken, User

Clock = Callable[[], datetime]


class UserRepository(Protocol):
    def find_by_email(self, email: str) -> User | None: ...
    def find_by_id(self, user_id: int) -> User | None: ...
    def find_by_verification_token(self, token: str) -> User | None: ...
    def add(self, user: User) -> User: ...
    def mark_email_verified(self, user_id: int) -> None: ...
    def update_password(self, user_id: int, password_hash: str) -> None: ...

    def change_email(
        self,
        user_id: int,
        email: str,
        verification_token: str,
        verification_expires_at: datetime,
    ) -> User:
        """Switch to ``email``, marking it unverified. Raises ``EmailInUseError`` on conflict."""
        ...

    def deactivate(self, user_id: int) -> bool:
        """Soft-delete the account; return whether an active row was changed."""
        ...


class RefreshTokenRepository(Protocol):
    def add(self, token: RefreshToken) -> RefreshToken: ...
    def find_by_value(self, value: str) -> RefreshToken | None: ...

    def mark_revoked(self, value: str, revoked_at: datetime) -> bool:
        """Revoke ``value`` if it is not revoked yet; return whether a row changed."""
        ...

    def claim_active(self, value: str, now: datetime) -> RefreshToken | None:
        """Atomically revoke ``value`` only if it is unrevoked and unexpired at ``now``.

        Returns the claimed (now revoked) token, or ``None`` when nothing
        matched. At most one concurrent caller can win the claim.
        """
        ...

    def revoke_all_for_user(self, user_id: int, revoked_at: datetime) -> int: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...
