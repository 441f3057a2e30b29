# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from jobgraph.application.services.token_service import utc_now
from jobgraph.domain.users.entities import User
from jobgraph.domain.users.exceptions import (
    VerificationTokenExpiredError,
    VerificationTokenInvalidError,
)
from jobgraph.domain.users.repositories import Clock, UserRepository


class VerifyEmailUseCase:
    def __init__(self, *, users: UserRepository, clock: Clock = utc_now) -> None:
        self._users = users
        self._clock = clock

    def execute(self, token: str) -> User:
        user = self._users.find_by_verification_token(token) if token else None
        if user is None:
            raise VerificationTokenInvalidError()
        expires_at = user.email_verification_expires_at
        if expires_at is not None and expires_at <= self._clock():
            raise VerificationTokenExpiredError()
        self._users.mark_email_verified(user.id)
        return user
