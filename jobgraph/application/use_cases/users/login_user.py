# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from jobgraph.application.services.token_service import TokenService
from jobgraph.domain.users.entities import ClientContext, TokenPair, User
from jobgraph.domain.users.exceptions import AccountLockedError, InvalidCredentialsError
from jobgraph.domain.users.repositories import PasswordHasher, UserRepository
from jobgraph.infrastructure.auth.login_attempts import LoginAttemptsTracker


class LoginUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        tokens: TokenService,
        password_hasher: PasswordHasher,
        attempts: LoginAttemptsTracker,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._password_hasher = password_hasher
        self._attempts = attempts

    def execute(
        self, email: str, password: str, context: ClientContext | None = None
    ) -> tuple[User, TokenPair]:
        email = email.strip().lower()
        ip_address = context.ip_address if context else None
        if self._attempts.is_locked(email):
            raise AccountLockedError(lockout_remaining=self._attempts.get_lockout_remaining(email))

        user = self._users.find_by_email(email)
        password_valid = (
            user is not None
            and user.is_active
            and self._password_hasher.verify(password, user.password_hash)
        )
        if not password_valid:
            self._attempts.record_attempt(email, success=False, ip_address=ip_address)
            if self._attempts.is_locked(email):
                raise AccountLockedError(lockout_remaining=self._attempts.get_lockout_remaining(email))
            raise InvalidCredentialsError()

        self._attempts.record_attempt(email, success=True, ip_address=ip_address)
        return user, self._tokens.issue_pair(user, context)
