from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from threading import Lock

_TMP_DIR = tempfile.mkdtemp(prefix="jobgraph-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'jobgraph-test.db')}"
os.environ["SECRET_KEY"] = "test-signing-secret-0123456789abcdef0123456789"
os.environ["APP_ENV"] = "test"
os.environ["ENABLE_RATE_LIMIT"] = "false"
os.environ["LOG_FILE"] = os.path.join(_TMP_DIR, "app.log")

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from jobgraph.application.services.token_service import TokenService  # noqa: E402
from jobgraph.domain.users.entities import RefreshToken, User  # noqa: E402
from jobgraph.domain.users.exceptions import EmailInUseError, UserAlreadyExistsError  # noqa: E402
from jobgraph.domain.users.repositories import (  # noqa: E402
    PasswordHasher,
    RefreshTokenRepository,
    UserRepository,
)

SECRET = os.environ["SECRET_KEY"]


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime.now(UTC).replace(microsecond=0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class InMemoryUserRepository(UserRepository):
    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._seq = 1

    def find_by_email(self, email: str) -> User | None:
        email = email.strip().lower()
        return next((u for u in self._users.values() if u.email == email), None)

    def find_by_id(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def find_by_verification_token(self, token: str) -> User | None:
        return next(
            (u for u in self._users.values() if u.email_verification_token == token), None
        )

    def add(self, user: User) -> User:
        if self.find_by_email(user.email):
            raise UserAlreadyExistsError()
        new_user = replace(user, id=self._seq)
        self._seq += 1
        self._users[new_user.id] = new_user
        return new_user

    def mark_email_verified(self, user_id: int) -> None:
        self._users[user_id] = replace(
            self._users[user_id],
            email_verified=True,
            email_verification_token=None,
            email_verification_expires_at=None,
        )

    def update_password(self, user_id: int, password_hash: str) -> None:
        self._users[user_id] = replace(self._users[user_id], password_hash=password_hash)

    def change_email(
        self,
        user_id: int,
        email: str,
        verification_token: str,
        verification_expires_at: datetime,
    ) -> User:
        if self.find_by_email(email):
            raise EmailInUseError()
        self._users[user_id] = replace(
            self._users[user_id],
            email=email,
            email_verified=False,
            email_verification_token=verification_token,
            email_verification_expires_at=verification_expires_at,
        )
        return self._users[user_id]

    def deactivate(self, user_id: int) -> bool:
        user = self._users.get(user_id)
        if user is None or not user.is_active:
            return False
        self._users[user_id] = replace(user, is_active=False)
        return True


class InMemoryRefreshTokenRepository(RefreshTokenRepository):
    def __init__(self) -> None:
        self._tokens: dict[str, RefreshToken] = {}
        self._lock = Lock()

    def add(self, token: RefreshToken) -> RefreshToken:
        with self._lock:
            stored = replace(token, id=len(self._tokens) + 1)
            self._tokens[token.token] = stored
            return stored

    def find_by_value(self, value: str) -> RefreshToken | None:
        return self._tokens.get(value)

    def mark_revoked(self, value: str, revoked_at: datetime) -> bool:
        with self._lock:
            token = self._tokens.get(value)
            if token is None or token.revoked:
                return False
            self._tokens[value] = replace(token, revoked=True, revoked_at=revoked_at)
            return True

    def claim_active(self, value: str, now: datetime) -> RefreshToken | None:
        with self._lock:
            token = self._tokens.get(value)
            if token is None or token.revoked or token.is_expired(now):
                return None
            claimed = replace(token, revoked=True, revoked_at=now)
            self._tokens[value] = claimed
            return claimed

    def revoke_all_for_user(self, user_id: int, revoked_at: datetime) -> int:
        with self._lock:
            count = 0
            for value, token in list(self._tokens.items()):
                if token.user_id == user_id and not token.revoked:
                    self._tokens[value] = replace(token, revoked=True, revoked_at=revoked_at)
                    count += 1
            return count

    def all(self) -> list[RefreshToken]:
        return list(self._tokens.values())


class DeterministicHasher(PasswordHasher):
    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, hashed: str) -> bool:
        return hashed == f"hashed:{password}"


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture()
def refresh_tokens() -> InMemoryRefreshTokenRepository:
    return InMemoryRefreshTokenRepository()


@pytest.fixture()
def hasher() -> DeterministicHasher:
    return DeterministicHasher()


@pytest.fixture()
def token_service(
    users: InMemoryUserRepository,
    refresh_tokens: InMemoryRefreshTokenRepository,
    clock: FakeClock,
) -> TokenService:
    return TokenService(
        SECRET,
        users=users,
        refresh_tokens=refresh_tokens,
        access_ttl=timedelta(minutes=15),
        refresh_ttl=timedelta(days=7),
        clock=clock,
    )


@pytest.fixture()
def make_user(users: InMemoryUserRepository, hasher: DeterministicHasher, clock: FakeClock):
    def _make(email: str = "alice@example.com", role: str = "candidate", password: str = "Secret1!") -> User:
        return users.add(
            User(
                id=0,
                email=email,
                password_hash=hasher.hash(password),
                first_name="Alice",
                last_name="Smith",
                role=role,  # type: ignore[arg-type]
                created_at=clock(),
            )
        )

    return _make


@pytest.fixture()
def reset_database() -> Iterator[None]:
    from jobgraph.infrastructure.db import ENGINE, Base, init_db

    Base.metadata.drop_all(bind=ENGINE)
    init_db()
    yield
    Base.metadata.drop_all(bind=ENGINE)


@pytest.fixture()
def app(reset_database: None, clock: FakeClock) -> Flask:
    from jobgraph.app import create_app
    from jobgraph.container import Container
    from jobgraph.shared.config import load_config

    container = Container(load_config(), clock=clock, password_hasher=DeterministicHasher())
    flask_app = create_app(container)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    return app.test_client()
