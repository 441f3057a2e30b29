# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobgraph.domain.users.entities import RefreshToken as DomainRefreshToken
from jobgraph.domain.users.entities import Role
from jobgraph.domain.users.entities import User as DomainUser
from jobgraph.domain.users.exceptions import EmailInUseError, UserAlreadyExistsError, UserNotFoundError
from jobgraph.domain.users.repositories import RefreshTokenRepository, UserRepository
from jobgraph.infrastructure.db.models import RefreshToken, User
from jobgraph.infrastructure.repositories.storage_errors import as_utc, storage_errors
from jobgraph.infrastructure.unit_of_work import unit_of_work_scope


def _user_to_domain(row: User) -> DomainUser:
    return DomainUser(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        first_name=row.first_name,
        last_name=row.last_name,
        role=Role.parse(row.role),
        created_at=as_utc(row.created_at),
        email_verified=bool(row.email_verified),
        is_active=bool(row.is_active),
        preferred_first_name=row.preferred_first_name,
        preferred_last_name=row.preferred_last_name,
        email_verification_token=row.email_verification_token,
        email_verification_expires_at=as_utc(row.email_verification_expires_at),
    )


def _token_to_domain(row: RefreshToken) -> DomainRefreshToken:
    return DomainRefreshToken(
        id=row.id,
        user_id=row.user_id,
        token=row.token,
        expires_at=as_utc(row.expires_at),
        created_at=as_utc(row.created_at),
        revoked=bool(row.revoked),
        revoked_at=as_utc(row.revoked_at),
        user_agent=row.user_agent,
        ip_address=row.ip_address,
    )


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    @storage_errors
    def find_by_email(self, email: str) -> DomainUser | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.scalars(select(User).where(User.email == email.strip().lower())).first()
            return _user_to_domain(row) if row else None

    @storage_errors
    def find_by_id(self, user_id: int) -> DomainUser | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(User, user_id)
            return _user_to_domain(row) if row else None

    @storage_errors
    def find_by_verification_token(self, token: str) -> DomainUser | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.scalars(
                select(User).where(User.email_verification_token == token)
            ).first()
            return _user_to_domain(row) if row else None

    @storage_errors
    def add(self, user: DomainUser) -> DomainUser:
        try:
            with unit_of_work_scope(self._session_factory) as session:
                row = User(
                    email=user.email,
                    password_hash=user.password_hash,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    preferred_first_name=user.preferred_first_name,
                    preferred_last_name=user.preferred_last_name,
                    role=user.role.value,
                    email_verified=user.email_verified,
                    email_verification_token=user.email_verification_token,
                    email_verification_expires_at=user.email_verification_expires_at,
                    is_active=user.is_active,
                    created_at=user.created_at,
                )
                session.add(row)
                session.flush()
                return _user_to_domain(row)
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email.
            raise UserAlreadyExistsError() from None

    @storage_errors
    def mark_email_verified(self, user_id: int) -> None:
        with unit_of_work_scope(self._session_factory) as session:
            session.execute(
                update(User)
                .where(User.id == user_id)
                .values(
                    email_verified=True,
                    email_verification_token=None,
                    email_verification_expires_at=None,
                )
            )

    @storage_errors
    def update_password(self, user_id: int, password_hash: str) -> None:
        with unit_of_work_scope(self._session_factory) as session:
            session.execute(
                update(User).where(User.id == user_id).values(password_hash=password_hash)
            )

    @storage_errors
    def change_email(
        self,
        user_id: int,
        email: str,
        verification_token: str,
        verification_expires_at: datetime,
    ) -> DomainUser:
        try:
            with unit_of_work_scope(self._session_factory) as session:
                row = session.get(User, user_id)
                if row is None:
                    raise UserNotFoundError()
                row.email = email.strip().lower()
                row.email_verified = False
                row.email_verification_token = verification_token
                row.email_verification_expires_at = verification_expires_at
                session.flush()
                return _user_to_domain(row)
        except IntegrityError:
            # Another account took the address between the check and the update.
            raise EmailInUseError() from None

    @storage_errors
    def deactivate(self, user_id: int) -> bool:
        with unit_of_work_scope(self._session_factory) as session:
            result = session.execute(
                update(User).where(User.id == user_id, User.is_active.is_(True)).values(is_active=False)
            )
            return result.rowcount == 1


class SqlAlchemyRefreshTokenRepository(RefreshTokenRepository):
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    @storage_errors
    def add(self, token: DomainRefreshToken) -> DomainRefreshToken:
        with unit_of_work_scope(self._session_factory) as session:
            row = RefreshToken(
                user_id=token.user_id,
                token=token.token,
                expires_at=token.expires_at,
                created_at=token.created_at,
                user_agent=token.user_agent,
                ip_address=token.ip_address,
            )
            session.add(row)
            session.flush()
            return _token_to_domain(row)

    @storage_errors
    def find_by_value(self, value: str) -> DomainRefreshToken | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.scalars(select(RefreshToken).where(RefreshToken.token == value)).first()
            return _token_to_domain(row) if row else None

    @storage_errors
    def mark_revoked(self, value: str, revoked_at: datetime) -> bool:
        with unit_of_work_scope(self._session_factory) as session:
            result = session.execute(
                update(RefreshToken)
                .where(RefreshToken.token == value, RefreshToken.revoked.is_(False))
                .values(revoked=True, revoked_at=revoked_at)
            )
            return result.rowcount == 1

    @storage_errors
    def claim_active(self, value: str, now: datetime) -> DomainRefreshToken | None:
        with unit_of_work_scope(self._session_factory) as session:
            # The single conditional UPDATE is the claim; only one writer can match the row.
            result = session.execute(
                update(RefreshToken)
                .where(
                    RefreshToken.token == value,
                    RefreshToken.revoked.is_(False),
                    RefreshToken.expires_at > now,
                )
                .values(revoked=True, revoked_at=now)
            )
            if result.rowcount != 1:
                return None
            row = session.scalars(select(RefreshToken).where(RefreshToken.token == value)).one()
            return _token_to_domain(row)

    @storage_errors
    def revoke_all_for_user(self, user_id: int, revoked_at: datetime) -> int:
        with unit_of_work_scope(self._session_factory) as session:
            result = session.execute(
                update(RefreshToken)
                .where(RefreshToken.user_id == user_id, RefreshToken.revoked.is_(False))
                .values(revoked=True, revoked_at=revoked_at)
            )
            return int(result.rowcount or 0)
