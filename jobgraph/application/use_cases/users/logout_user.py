"""Use-case for revoking a refresh token."""

from __future__ import annotations

from jobgraph.application.services.token_service import TokenService


class LogoutUserUseCase:
    def __init__(self, *, tokens: TokenService) -> None:
        self._tokens = tokens

    def execute(self, refresh_token: str | None) -> None:
        if refresh_token:
            self._tokens.revoke(refresh_token)
