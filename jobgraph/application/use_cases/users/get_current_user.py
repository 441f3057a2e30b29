from __future__ import annotations

from jobgraph.domain.users.entities import User
from jobgraph.domain.users.exceptions import UserNotFoundError
from jobgraph.domain.users.repositories import UserRepository


class GetCurrentUserUseCase:
    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    def execute(self, user_id: int) -> User:
        user = self._users.find_by_id(user_id)
        if user is None or not user.is_active:
            raise UserNotFoundError()
        return user
