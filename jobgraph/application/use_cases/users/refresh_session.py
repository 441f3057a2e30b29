"""Use-case for exchanging a refresh token for a new token pair."""

from __future__ import annotations

from jobgraph.application.services.token_service import TokenService
from jobgraph.domain.users.entities import ClientContext, TokenPair


class RefreshSessionUseCase:
    def __init__(self, *, tokens: TokenService) -> None:
        self._tokens = tokens

    def execute(self, refresh_token: str, context: ClientContext | None = None) -> TokenPair:
        return self._tokens.refresh(refresh_token, context)
