# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from jobgraph.application.services.token_service import TokenService
from jobgraph.domain.users.exceptions import InvalidPasswordError, UserNotFoundError
from jobgraph.domain.users.repositories import PasswordHasher, UserRepository
from jobgraph.shared.logging import logger


class ChangePasswordUseCase:
    """Replace a user's password and sign every existing session out."""

    def __init__(
        self,
        *,
        users: UserRepository,
        tokens: TokenService,
        password_hasher: PasswordHasher,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._password_hasher = password_hasher

    def execute(self, user_id: int, current_password: str, new_password: str) -> int:
        user = self._users.find_by_id(user_id)
        if user is None or not user.is_active:
            raise UserNotFoundError()
        if not self._password_hasher.verify(current_password, user.password_hash):
            raise InvalidPasswordError()

        self._users.update_password(user_id, self._password_hasher.hash(new_password))
        revoked = self._tokens.revoke_all(user_id)
        logger.info(f"change_password: user={user_id} revoked_sessions={revoked}")
        return revoked
