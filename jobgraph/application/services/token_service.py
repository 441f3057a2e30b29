# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Issuing and verifying access and refresh tokens.

Access tokens are HMAC-signed JWTs verified without any storage lookup, so
they cannot be revoked before they expire. Refresh tokens are opaque random
strings stored verbatim; each one can be exchanged exactly once.
"""

from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from jobgraph.domain.exceptions import InvariantViolation
from jobgraph.domain.users.entities import (
    ClientContext,
    Identity,
    RefreshToken,
    Role,
    TokenPair,
    User,
)
from jobgraph.domain.users.exceptions import (
    ExpiredTokenError,
    InvalidTokenError,
    RevokedTokenError,
    UnknownTokenError,
)
from jobgraph.domain.users.repositories import Clock, RefreshTokenRepository, UserRepository
from jobgraph.shared.logging import logger

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_BYTES = 64


def utc_now() -> datetime:
    return datetime.now(UTC)


class TokenService:
    def __init__(
        self,
        secret: str,
        *,
        users: UserRepository,
        refresh_tokens: RefreshTokenRepository,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        algorithm: str = "HS256",
        clock: Clock = utc_now,
    ) -> None:
        if not secret:
            raise ValueError("token signing secret must not be empty")
        self._secret = secret
        self._users = users
        self._refresh_tokens = refresh_tokens
        self._access_ttl = access_ttl
        self._refresh_ttl = refresh_ttl
        self._algorithm = algorithm
        self._clock = clock

    def issue_access_token(self, user: User) -> str:
        now = self._clock()
        claims = {
            "sub": str(user.id),
            "role": user.role.value,
            "type": ACCESS_TOKEN_TYPE,
            "iat": int(now.timestamp()),
            "exp": int((now + self._access_ttl).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def issue_refresh_token(self, user: User, context: ClientContext | None = None) -> str:
        context = context or ClientContext()
        now = self._clock()
        value = secrets.token_hex(REFRESH_TOKEN_BYTES)
        self._refresh_tokens.add(
            RefreshToken(
                user_id=user.id,
                token=value,
                expires_at=now + self._refresh_ttl,
                created_at=now,
                user_agent=context.user_agent,
                ip_address=context.ip_address,
            )
        )
        logger.debug(f"tokens: issued refresh token user={user.id} ip={context.ip_address}")
        return value

    def issue_pair(self, user: User, context: ClientContext | None = None) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access_token(user),
            refresh_token=self.issue_refresh_token(user, context),
        )

    def verify_access_token(self, token: str) -> Identity:
        claims = self._decode(token)
        if claims["exp"] <= self._clock().timestamp():
            raise ExpiredTokenError()
        try:
            return Identity(user_id=int(claims["sub"]), role=Role.parse(claims["role"]))
        except (TypeError, ValueError, InvariantViolation):
            raise InvalidTokenError() from None

    def _decode(self, token: str) -> dict[str, Any]:
        # Time claims are judged against the injected clock, not by PyJWT.
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["sub", "role", "exp", "type"],
                },
            )
        except jwt.InvalidTokenError:
            raise InvalidTokenError() from None
        if claims.get("type") != ACCESS_TOKEN_TYPE or not isinstance(claims.get("exp"), int | float):
            raise InvalidTokenError()
        return claims

    def refresh(self, old_token: str, context: ClientContext | None = None) -> TokenPair:
        now = self._clock()
        claimed = self._refresh_tokens.claim_active(old_token, now)
        if claimed is None:
            raise self._rejection_for(old_token, now)

        user = self._users.find_by_id(claimed.user_id)
        if user is None or not user.is_active:
            logger.warning(f"tokens: refresh token owner missing or inactive user={claimed.user_id}")
            raise UnknownTokenError()

        logger.info(f"tokens: rotated refresh token user={user.id}")
        return self.issue_pair(user, context)

    def _rejection_for(self, value: str, now: datetime) -> Exception:
        stored = self._refresh_tokens.find_by_value(value)
        if stored is None:
            return UnknownTokenError()
        if stored.revoked:
            logger.warning(f"tokens: revoked refresh token presented user={stored.user_id}")
            return RevokedTokenError()
        if stored.is_expired(now):
            return ExpiredTokenError("Refresh token has expired")
        # Claim failed although the row looks usable: another writer got there first.
        return RevokedTokenError()

    def revoke(self, token: str) -> None:
        if not token:
            return
        changed = self._refresh_tokens.mark_revoked(token, self._clock())
        logger.debug(f"tokens: revoke changed={changed}")

    def revoke_all(self, user_id: int) -> int:
        count = self._refresh_tokens.revoke_all_for_user(user_id, self._clock())
        logger.info(f"tokens: revoked {count} refresh tokens user={user_id}")
        return count


__all__ = ["TokenService", "utc_now"]
