from __future__ import annotations

from typing import cast
from unittest.mock import MagicMock

import pytest
from flask import Flask

from jobgraph.application.services.token_service import TokenService
from jobgraph.domain.users.entities import Identity, Role
from jobgraph.domain.users.exceptions import (
    ExpiredTokenError,
    ForbiddenError,
    InvalidTokenError,
    NoTokenError,
    UnauthorizedError,
)
from jobgraph.infrastructure.audit import AuditAction
from jobgraph.interfaces.http.pipeline import (
    Authenticate,
    RequestContext,
    RequireRole,
    bearer_token,
    guarded,
    require_role,
    run_stages,
)
from jobgraph.shared.errors import InternalError, register_error_handler, success_response


def _context(header: str | None = None) -> RequestContext:
    return RequestContext(headers={"Authorization": header} if header is not None else {})


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("Basic dXNlcjpwYXNz", None),
        ("bearer abc", None),
        ("Bearer ", None),
        ("", None),
    ],
)
def test_bearer_token_requires_exact_scheme(header: str, expected: str | None) -> None:
    assert bearer_token({"Authorization": header}) == expected


def test_authenticate_attaches_identity(token_service: TokenService, make_user) -> None:
    user = make_user(role="employer")
    context = _context(f"Bearer {token_service.issue_access_token(user)}")

    Authenticate(token_service)(context)

    assert context.identity == Identity(user.id, Role.EMPLOYER)
    assert context.user_id == user.id


@pytest.mark.parametrize("header", [None, "Basic dXNlcjpwYXNz", "Token abc"])
def test_authenticate_without_bearer_is_no_token(token_service: TokenService, header) -> None:
    with pytest.raises(NoTokenError):
        Authenticate(token_service)(_context(header))


def test_authenticate_collapses_expired_into_invalid(token_service: TokenService, make_user, clock) -> None:
    token = token_service.issue_access_token(make_user())
    clock.advance(hours=1)

    with pytest.raises(InvalidTokenError) as exc_info:
        Authenticate(token_service)(_context(f"Bearer {token}"))

    assert not isinstance(exc_info.value, ExpiredTokenError)
    assert exc_info.value.code == "INVALID_TOKEN"


def test_authenticate_fails_closed_on_unexpected_error() -> None:
    tokens = MagicMock()
    tokens.verify_access_token.side_effect = RuntimeError("boom")
    context = _context("Bearer whatever")

    with pytest.raises(InternalError):
        Authenticate(cast(TokenService, tokens))(context)

    assert context.identity is None


def test_require_role_checks_membership() -> None:
    guard = require_role(Role.EMPLOYER)

    guard(RequestContext(headers={}, identity=Identity(1, Role.EMPLOYER)))
    with pytest.raises(ForbiddenError) as exc_info:
        guard(RequestContext(headers={}, identity=Identity(2, Role.CANDIDATE)))

    assert exc_info.value.message == "Access denied. Required role: employer"


def test_require_role_audits_denials() -> None:
    audit = MagicMock()
    guard = require_role(Role.EMPLOYER, audit=audit)

    guard(RequestContext(headers={}, identity=Identity(1, Role.EMPLOYER)))
    audit.record.assert_not_called()

    with pytest.raises(ForbiddenError):
        guard(RequestContext(headers={}, identity=Identity(2, Role.CANDIDATE)))
    audit.record.assert_called_once_with(
        AuditAction.ACCESS_FORBIDDEN,
        user_id=2,
        details={"role": "candidate", "required": ["employer"]},
        success=False,
    )


def test_require_role_without_identity_is_unauthorized() -> None:
    with pytest.raises(UnauthorizedError):
        require_role(Role.CANDIDATE)(RequestContext(headers={}))


def test_require_role_rejects_bad_configuration() -> None:
    with pytest.raises(ValueError):
        require_role()
    with pytest.raises(ValueError):
        RequireRole(["employer"])  # type: ignore[list-item]


def test_run_stages_stops_at_first_failure(token_service: TokenService) -> None:
    later = MagicMock()

    with pytest.raises(NoTokenError):
        run_stages([Authenticate(token_service), later], _context())

    later.assert_not_called()


@pytest.fixture()
def guarded_app(token_service: TokenService) -> Flask:
    app = Flask(__name__)
    register_error_handler(app)

    def whoami(context: RequestContext):
        return success_response({"userId": context.user_id, "role": context.identity.role.value})

    app.add_url_rule(
        "/employer",
        view_func=guarded(whoami, Authenticate(token_service), require_role(Role.EMPLOYER)),
    )
    return app


def test_guarded_route_envelopes(guarded_app: Flask, token_service: TokenService, make_user) -> None:
    employer = make_user(email="boss@example.com", role="employer")
    candidate = make_user(email="cand@example.com", role="candidate")

    with guarded_app.test_client() as client:
        ok = client.get(
            "/employer",
            headers={"Authorization": f"Bearer {token_service.issue_access_token(employer)}"},
        )
        forbidden = client.get(
            "/employer",
            headers={"Authorization": f"Bearer {token_service.issue_access_token(candidate)}"},
        )
        basic = client.get("/employer", headers={"Authorization": "Basic dXNlcjpwYXNz"})
        garbage = client.get("/employer", headers={"Authorization": "Bearer garbage"})

    assert ok.status_code == 200
    assert ok.get_json() == {"success": True, "data": {"userId": employer.id, "role": "employer"}}

    assert forbidden.status_code == 403
    assert forbidden.get_json()["error"] == {
        "code": "FORBIDDEN",
        "message": "Access denied. Required role: employer",
        "details": {"required_roles": ["employer"]},
    }

    assert basic.status_code == 401
    assert basic.get_json() == {
        "success": False,
        "error": {"code": "NO_TOKEN", "message": "No authentication token provided"},
    }
    assert basic.headers["WWW-Authenticate"] == "Bearer"

    assert garbage.status_code == 401
    assert garbage.get_json()["error"]["code"] == "INVALID_TOKEN"
