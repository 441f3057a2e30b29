# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
from datetime import timedelta

from jobgraph.application.services.token_service import utc_now
from jobgraph.domain.users.entities import User
from jobgraph.domain.users.exceptions import (
    EmailInUseError,
    InvalidPasswordError,
    SameEmailError,
    UserNotFoundError,
)
from jobgraph.domain.users.repositories import Clock, PasswordHasher, UserRepository
from jobgraph.shared.logging import logger


class ChangeEmailUseCase:
    """Move an account to a new address, which then has to be verified again.

    Sessions stay valid: the e-mail is not part of either token.
    """

    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
        verification_ttl: timedelta = timedelta(hours=24),
        clock: Clock = utc_now,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._verification_ttl = verification_ttl
        self._clock = clock

    def execute(self, user_id: int, new_email: str, password: str) -> User:
        new_email = new_email.strip().lower()
        user = self._users.find_by_id(user_id)
        if user is None or not user.is_active:
            raise UserNotFoundError()
        if new_email == user.email:
            raise SameEmailError()
        if not self._password_hasher.verify(password, user.password_hash):
            raise InvalidPasswordError("Password is incorrect")
        if self._users.find_by_email(new_email) is not None:
            raise EmailInUseError()

        updated = self._users.change_email(
            user_id,
            new_email,
            verification_token=secrets.token_hex(32),
            verification_expires_at=self._clock() + self._verification_ttl,
        )
        logger.info(f"change_email: user={user_id} now unverified")
        return updated
