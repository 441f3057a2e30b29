# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from jobgraph.application.services.token_service import TokenService
from jobgraph.domain.users.exceptions import InvalidPasswordError, UserNotFoundError
from jobgraph.domain.users.repositories import PasswordHasher, UserRepository
from jobgraph.shared.logging import logger


class DeleteAccountUseCase:
    """Soft-delete an account: the row stays, login and refresh stop working."""

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

    def execute(self, user_id: int, password: str) -> int:
        user = self._users.find_by_id(user_id)
        if user is None or not user.is_active:
            raise UserNotFoundError()
        if not self._password_hasher.verify(password, user.password_hash):
            raise InvalidPasswordError("Password is incorrect")

        if not self._users.deactivate(user_id):
            # A concurrent request deactivated it first.
            raise UserNotFoundError()
        revoked = self._tokens.revoke_all(user_id)
        logger.info(f"delete_account: user={user_id} deactivated revoked_sessions={revoked}")
        return revoked
