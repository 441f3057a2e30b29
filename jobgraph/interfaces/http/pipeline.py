# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Per-route request pipeline.

A guarded route declares an ordered tuple of stages. Each stage receives the
same :class:`RequestContext` and either returns normally, possibly after
filling in the context, or raises an :class:`~jobgraph.shared.errors.AppError`
which aborts the chain and becomes the response. Nothing is stored on
module-level state; the context is the only thing stages share.

    bp.add_url_rule(
        "/jobs",
        view_func=guarded(self.create_job, Authenticate(tokens), require_role(Role.EMPLOYER)),
        methods=["POST"],
    )
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from functools import wraps
from typing import Any, Protocol

from flask import g, has_request_context, request

from jobgraph.application.services.token_service import TokenService
from jobgraph.domain.users.entities import Identity, Role
from jobgraph.domain.users.exceptions import (
    ExpiredTokenError,
    ForbiddenError,
    InvalidTokenError,
    NoTokenError,
    UnauthorizedError,
)
from jobgraph.infrastructure.audit import AuditAction, AuditTrail
from jobgraph.shared.errors import InternalError
from jobgraph.shared.logging import bind_user, logger

BEARER_PREFIX = "Bearer "


@dataclass(slots=True)
class RequestContext:
    headers: Mapping[str, str]
    identity: Identity | None = None

    @property
    def user_id(self) -> int:
        if self.identity is None:
            raise UnauthorizedError()
        return self.identity.user_id


class Stage(Protocol):
    def __call__(self, context: RequestContext) -> None: ...


def bearer_token(headers: Mapping[str, str]) -> str | None:
    header = headers.get("Authorization")
    if not header or not header.startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX):].strip() or None


class Authenticate:
    """Resolve the bearer token into an :class:`Identity` or reject the request."""

    def __init__(self, tokens: TokenService) -> None:
        self._tokens = tokens

    def __call__(self, context: RequestContext) -> None:
        token = bearer_token(context.headers)
        if token is None:
            raise NoTokenError()
        try:
            identity = self._tokens.verify_access_token(token)
        except (InvalidTokenError, ExpiredTokenError):
            # Callers are not told whether the token was forged or merely stale.
            raise InvalidTokenError() from None
        except Exception:
            logger.exception("auth: token verification failed unexpectedly")
            raise InternalError("Authentication error") from None
        context.identity = identity
        if has_request_context():
            g.user_id = identity.user_id
            bind_user(identity.user_id)


class RequireRole:
    def __init__(self, roles: Iterable[Role], *, audit: AuditTrail | None = None) -> None:
        roles = tuple(dict.fromkeys(roles))
        if not roles:
            raise ValueError("at least one role is required")
        for role in roles:
            if not isinstance(role, Role):
                raise ValueError(f"not a role: {role!r}")
        self.roles: tuple[Role, ...] = roles
        self._audit = audit

    def __call__(self, context: RequestContext) -> None:
        if context.identity is None:
            raise UnauthorizedError()
        if context.identity.role not in self.roles:
            self._report(context.identity)
            raise ForbiddenError(self.roles)

    def _report(self, identity: Identity) -> None:
        details = {"role": identity.role.value, "required": [r.value for r in self.roles]}
        if self._audit is None:
            logger.warning(f"auth: forbidden user={identity.user_id} {details}")
            return
        self._audit.record(
            AuditAction.ACCESS_FORBIDDEN, user_id=identity.user_id, details=details, success=False
        )


def require_role(*roles: Role, audit: AuditTrail | None = None) -> RequireRole:
    return RequireRole(roles, audit=audit)


def run_stages(stages: Sequence[Stage], context: RequestContext) -> RequestContext:
    for stage in stages:
        stage(context)
    return context


def guarded(view: Callable[..., Any], *stages: Stage) -> Callable[..., Any]:
    """Wrap ``view(context, **route_args)`` so ``stages`` run before it."""
    chain = tuple(stages)

    @wraps(view)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        context = run_stages(chain, RequestContext(headers=request.headers))
        return view(context, *args, **kwargs)

    return wrapper


__all__ = [
    "Authenticate",
    "RequestContext",
    "RequireRole",
    "Stage",
    "bearer_token",
    "guarded",
    "require_role",
    "run_stages",
]
