# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
from datetime import timedelta

from jobgraph.application.services.token_service import TokenService, utc_now
from jobgraph.domain.users.entities import ClientContext, Role, TokenPair, User
from jobgraph.domain.users.exceptions import UserAlreadyExistsError
from jobgraph.domain.users.repositories import Clock, PasswordHasher, UserRepository
from jobgraph.shared.logging import logger


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        tokens: TokenService,
        password_hasher: PasswordHasher,
        verification_ttl: timedelta = timedelta(hours=24),
        clock: Clock = utc_now,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._password_hasher = password_hasher
        self._verification_ttl = verification_ttl
        self._clock = clock

    def execute(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: Role,
        preferred_first_name: str | None = None,
        preferred_last_name: str | None = None,
        context: ClientContext | None = None,
    ) -> tuple[User, TokenPair]:
        email = email.strip().lower()
        if self._users.find_by_email(email):
            raise UserAlreadyExistsError()

        now = self._clock()
        user = User(
            id=0,
            email=email,
            password_hash=self._password_hasher.hash(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
            created_at=now,
            preferred_first_name=preferred_first_name,
            preferred_last_name=preferred_last_name,
            email_verification_token=secrets.token_hex(32),
            email_verification_expires_at=now + self._verification_ttl,
        )
        persisted = self._users.add(user)
        logger.info(f"register: created user={persisted.id} role={persisted.role.value}")
        return persisted, self._tokens.issue_pair(persisted, context)
