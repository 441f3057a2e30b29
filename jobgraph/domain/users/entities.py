# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Identity, credential and token entities."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import assert_never

from jobgraph.domain.exceptions import InvariantViolation


class Role(StrEnum):
    """Closed set of domain roles; there is no hierarchy between them."""

    CANDIDATE = "candidate"
    EMPLOYER = "employer"

    @classmethod
    def parse(cls, value: object) -> Role:
        if isinstance(value, Role):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvariantViolation(
                f"role must be one of {', '.join(r.value for r in cls)}", field="role"
            ) from None

    @property
    def label(self) -> str:
        match self:
            case Role.CANDIDATE:
                return "candidate"
            case Role.EMPLOYER:
                return "employer"
            case _:
                assert_never(self)


def describe_roles(roles: Iterable[Role]) -> str:
    return " or ".join(role.label for role in roles)


@dataclass(slots=True, frozen=True)
class User:

    id: int
    email: str
    password_hash: str
    first_name: str
    last_name: str
    role: Role
    created_at: datetime
    email_verified: bool = False
    is_active: bool = True
    preferred_first_name: str | None = None
    preferred_last_name: str | None = None
    email_verification_token: str | None = None
    email_verification_expires_at: datetime | None = None

    def __post_init__(self) -> None:
        if "@" not in self.email:
            raise InvariantViolation("email must contain '@'", field="email")
        object.__setattr__(self, "email", self.email.strip().lower())
        object.__setattr__(self, "role", Role.parse(self.role))

    @property
    def display_first_name(self) -> str:
        return self.preferred_first_name or self.first_name

    @property
    def display_last_name(self) -> str:
        return self.preferred_last_name or self.last_name


@dataclass(slots=True, frozen=True)
class Identity:
    """Who is calling: attached to the request context after authentication."""

    user_id: int
    role: Role


@dataclass(slots=True, frozen=True)
class ClientContext:
    """Where a refresh token was issued from. Kept for audit only."""

    user_agent: str | None = None
    ip_address: str | None = None


@dataclass(slots=True, frozen=True)
class RefreshToken:

    user_id: int
    token: str
    expires_at: datetime
    created_at: datetime
    revoked: bool = False
    revoked_at: datetime | None = None
    user_agent: str | None = None
    ip_address: str | None = None
    id: int = 0

    def __post_init__(self) -> None:
        if not self.token:
            raise InvariantViolation("refresh token value must not be empty", field="token")
        if self.expires_at <= self.created_at:
            raise InvariantViolation("refresh token must expire after issuance", field="expires_at")

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


@dataclass(slots=True, frozen=True)
class TokenPair:

    access_token: str
    refresh_token: str


__all__ = [
    "ClientContext",
    "Identity",
    "RefreshToken",
    "Role",
    "TokenPair",
    "User",
    "describe_roles",
]
