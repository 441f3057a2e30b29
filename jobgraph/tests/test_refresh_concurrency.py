"""Refresh rotation against the real SQLAlchemy repositories."""

from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from jobgraph.application.services.token_service import TokenService
from jobgraph.domain.users.entities import Role, User
from jobgraph.domain.users.exceptions import RevokedTokenError, UnknownTokenError
from jobgraph.infrastructure.db import SessionFactory
from jobgraph.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyRefreshTokenRepository,
    SqlAlchemyUserRepository,
)

WORKERS = 6


@pytest.fixture()
def sql_token_service(reset_database: None, clock) -> TokenService:
    return TokenService(
        "concurrency-test-secret-0123456789abcdef0123",
        users=SqlAlchemyUserRepository(SessionFactory),
        refresh_tokens=SqlAlchemyRefreshTokenRepository(SessionFactory),
        access_ttl=timedelta(minutes=15),
        refresh_ttl=timedelta(days=7),
        clock=clock,
    )


@pytest.fixture()
def stored_user(reset_database: None, clock) -> User:
    return SqlAlchemyUserRepository(SessionFactory).add(
        User(
            id=0,
            email="race@example.com",
            password_hash="hash",
            first_name="Race",
            last_name="Condition",
            role=Role.CANDIDATE,
            created_at=clock(),
        )
    )


def test_double_submitted_refresh_token_has_one_winner(
    sql_token_service: TokenService, stored_user: User
) -> None:
    value = sql_token_service.issue_refresh_token(stored_user)
    barrier = threading.Barrier(WORKERS)
    results: list[str] = []
    lock = threading.Lock()

    def attempt() -> None:
        barrier.wait()
        try:
            sql_token_service.refresh(value)
            outcome = "ok"
        except (RevokedTokenError, UnknownTokenError):
            outcome = "rejected"
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=attempt) for _ in range(WORKERS)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert sorted(results) == ["ok"] + ["rejected"] * (WORKERS - 1)


def test_claim_is_conditional_on_state(sql_token_service: TokenService, stored_user: User, clock) -> None:
    repository = SqlAlchemyRefreshTokenRepository(SessionFactory)
    value = sql_token_service.issue_refresh_token(stored_user)

    claimed = repository.claim_active(value, clock())
    assert claimed is not None
    assert claimed.revoked is True
    assert claimed.revoked_at == clock()
    assert repository.claim_active(value, clock()) is None
    assert repository.mark_revoked(value, clock()) is False

    expiring = sql_token_service.issue_refresh_token(stored_user)
    assert repository.claim_active(expiring, clock() + timedelta(days=7)) is None
    assert repository.find_by_value(expiring).revoked is False
