from __future__ import annotations

from datetime import UTC, datetime
from typing import cast
from unittest.mock import MagicMock

import pytest
from flask import Flask

from jobgraph.application.services.token_service import TokenService
from jobgraph.application.use_cases.users.register_user import RegisterUserUseCase
from jobgraph.domain.users.entities import Role, TokenPair, User
from jobgraph.domain.users.exceptions import RevokedTokenError
from jobgraph.interfaces.http.controllers.auth_controller import AuthController
from jobgraph.shared.errors import register_error_handler

VALID_REGISTRATION = {
    "email": "Alice@Example.com",
    "password": "Secret1!",
    "firstName": "Alice",
    "lastName": "Smith",
    "role": "employer",
}


@pytest.fixture()
def flask_app() -> Flask:
    app = Flask(__name__)
    register_error_handler(app)
    return app


def _controller(**overrides) -> AuthController:
    deps = dict(
        tokens=MagicMock(),
        audit=MagicMock(),
        register_use_case=MagicMock(),
        login_use_case=MagicMock(),
        logout_use_case=MagicMock(),
        refresh_use_case=MagicMock(),
        verify_email_use_case=MagicMock(),
        change_password_use_case=MagicMock(),
        get_current_user_use_case=MagicMock(),
        change_email_use_case=MagicMock(),
        delete_account_use_case=MagicMock(),
    )
    deps.update(overrides)
    return AuthController(**deps)


def test_register_endpoint_returns_user_and_tokens(flask_app: Flask) -> None:
    calls: dict[str, dict] = {}

    class StubRegister:
        def execute(self, **kwargs) -> tuple[User, TokenPair]:
            calls["kwargs"] = kwargs
            user = User(
                id=7,
                email=kwargs["email"],
                password_hash="hash",
                first_name=kwargs["first_name"],
                last_name=kwargs["last_name"],
                role=kwargs["role"],
                created_at=datetime(2025, 1, 1, tzinfo=UTC),
            )
            return user, TokenPair("access-1", "refresh-1")

    controller = _controller(register_use_case=cast(RegisterUserUseCase, StubRegister()))
    flask_app.register_blueprint(controller.as_blueprint())

    with flask_app.test_client() as client:
        response = client.post("/api/v1/auth/register", json=VALID_REGISTRATION)

    assert response.status_code == 201
    assert calls["kwargs"]["email"] == "alice@example.com"
    assert calls["kwargs"]["role"] is Role.EMPLOYER
    body = response.get_json()
    assert body["success"] is True
    assert body["data"]["accessToken"] == "access-1"
    assert body["data"]["refreshToken"] == "refresh-1"
    assert body["data"]["user"]["firstName"] == "Alice"
    assert body["data"]["user"]["role"] == "employer"


@pytest.mark.parametrize(
    ("overrides", "code"),
    [
        ({"password": "weakpass"}, "WEAK_PASSWORD"),
        ({"email": "not-an-email"}, "INVALID_EMAIL"),
        ({"role": "admin"}, "INVALID_ROLE"),
        ({"firstName": ""}, "VALIDATION_ERROR"),
    ],
)
def test_register_validation_errors(flask_app: Flask, overrides: dict, code: str) -> None:
    register_use_case = MagicMock()
    flask_app.register_blueprint(_controller(register_use_case=register_use_case).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post("/api/v1/auth/register", json={**VALID_REGISTRATION, **overrides})

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["error"]["code"] == code
    register_use_case.execute.assert_not_called()


def test_login_missing_fields_returns_400(flask_app: Flask) -> None:
    flask_app.register_blueprint(_controller().as_blueprint())

    with flask_app.test_client() as client:
        response = client.post("/api/v1/auth/login", json={"email": "a@b.co"})

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["error"]["code"] == "VALIDATION_ERROR"
    assert payload["error"]["details"]["fields"] == ["password"]


def test_login_keeps_password_whitespace(flask_app: Flask) -> None:
    login_use_case = MagicMock()
    login_use_case.execute.return_value = (
        User(
            id=3,
            email="alice@example.com",
            password_hash="hash",
            first_name="Alice",
            last_name="Smith",
            role=Role.CANDIDATE,
            created_at=datetime(2025, 1, 1, tzinfo=UTC),
            preferred_first_name="Ali",
        ),
        TokenPair("access-1", "refresh-1"),
    )
    flask_app.register_blueprint(_controller(login_use_case=login_use_case).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post(
            "/api/v1/auth/login", json={"email": "  Alice@Example.com ", "password": " Secret1! "}
        )

    assert response.status_code == 200
    email, password, _ = login_use_case.execute.call_args.args
    assert email == "alice@example.com"
    assert password == " Secret1! "
    assert response.get_json()["data"]["user"]["displayName"] == "Ali Smith"


def test_refresh_endpoint_reports_revoked_token(flask_app: Flask) -> None:
    refresh_use_case = MagicMock()
    refresh_use_case.execute.side_effect = RevokedTokenError()
    flask_app.register_blueprint(_controller(refresh_use_case=refresh_use_case).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post("/api/v1/auth/refresh", json={"refreshToken": "old"})

    assert response.status_code == 401
    assert response.get_json()["error"]["code"] == "TOKEN_REVOKED"


def test_logout_always_succeeds(flask_app: Flask) -> None:
    logout_use_case = MagicMock()
    flask_app.register_blueprint(_controller(logout_use_case=logout_use_case).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post("/api/v1/auth/logout", json={"refreshToken": "whatever"})
        empty = client.post("/api/v1/auth/logout")

    assert response.status_code == 200
    assert empty.status_code == 200
    logout_use_case.execute.assert_any_call("whatever")
    logout_use_case.execute.assert_any_call(None)


def test_me_requires_bearer_token(flask_app: Flask) -> None:
    tokens = MagicMock(spec=TokenService)
    get_current_user = MagicMock()
    flask_app.register_blueprint(
        _controller(tokens=tokens, get_current_user_use_case=get_current_user).as_blueprint()
    )

    with flask_app.test_client() as client:
        response = client.get("/api/v1/auth/me")

    assert response.status_code == 401
    assert response.get_json()["error"]["code"] == "NO_TOKEN"
    tokens.verify_access_token.assert_not_called()
    get_current_user.execute.assert_not_called()


def test_unexpected_error_is_internal_error(flask_app: Flask) -> None:
    login_use_case = MagicMock()
    login_use_case.execute.side_effect = RuntimeError("database exploded")
    flask_app.register_blueprint(_controller(login_use_case=login_use_case).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post(
            "/api/v1/auth/login", json={"email": "a@b.co", "password": "x"}
        )

    assert response.status_code == 500
    assert response.get_json() == {
        "success": False,
        "error": {"code": "INTERNAL_ERROR", "message": "An internal error occurred"},
    }
