"""Application dependency container."""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
from functools import cached_property

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from jobgraph.application.services.password_hashing import WerkzeugPasswordHasher
from jobgraph.application.services.token_service import TokenService, utc_now
from jobgraph.application.use_cases.jobs.apply_to_job import (
    ApplyToJobUseCase,
    ListCandidateApplicationsUseCase,
)
from jobgraph.application.use_cases.jobs.create_job import CreateJobUseCase
from jobgraph.application.use_cases.jobs.list_jobs import ListEmployerJobsUseCase, ListJobsUseCase
from jobgraph.application.use_cases.users.change_email import ChangeEmailUseCase
from jobgraph.application.use_cases.users.change_password import ChangePasswordUseCase
from jobgraph.application.use_cases.users.delete_account import DeleteAccountUseCase
from jobgraph.application.use_cases.users.get_current_user import GetCurrentUserUseCase
from jobgraph.application.use_cases.users.login_user import LoginUserUseCase
from jobgraph.application.use_cases.users.logout_user import LogoutUserUseCase
from jobgraph.application.use_cases.users.refresh_session import RefreshSessionUseCase
from jobgraph.application.use_cases.users.register_user import RegisterUserUseCase
from jobgraph.application.use_cases.users.verify_email import VerifyEmailUseCase
from jobgraph.domain.users.repositories import Clock, PasswordHasher
from jobgraph.infrastructure.audit import AuditTrail
from jobgraph.infrastructure.auth.login_attempts import LoginAttemptsTracker
from jobgraph.infrastructure.db import ENGINE, SessionFactory
from jobgraph.infrastructure.repositories.jobs.sqlalchemy_job_repository import (
    SqlAlchemyApplicationRepository,
    SqlAlchemyJobRepository,
)
from jobgraph.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyRefreshTokenRepository,
    SqlAlchemyUserRepository,
)
from jobgraph.interfaces.http.controllers.auth_controller import AuthController
from jobgraph.interfaces.http.controllers.jobs_controller import JobsController
from jobgraph.interfaces.http.controllers.misc_controller import MiscController
from jobgraph.shared.config import AppConfig, load_config


class Container:
    """Builds every collaborator from one config, clock and database.

    ``engine`` and ``session_factory`` must point at the same database: the
    schema, repositories, audit trail and health probe all use them. When only
    a ``sessionmaker`` is given, its bound engine is used.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        clock: Clock = utc_now,
        engine: Engine | None = None,
        session_factory: Callable[[], Session] | None = None,
        password_hasher: PasswordHasher | None = None,
    ) -> None:
        self.config = config or load_config()
        self.clock = clock
        self.engine = engine or _bound_engine(session_factory) or ENGINE
        if session_factory is None:
            session_factory = (
                SessionFactory
                if self.engine is ENGINE
                else sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
            )
        self._session_factory = session_factory
        self._password_hasher = password_hasher

    @cached_property
    def password_hasher(self) -> PasswordHasher:
        return self._password_hasher or WerkzeugPasswordHasher()

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository(self._session_factory)

    @cached_property
    def refresh_token_repository(self) -> SqlAlchemyRefreshTokenRepository:
        return SqlAlchemyRefreshTokenRepository(self._session_factory)

    @cached_property
    def job_repository(self) -> SqlAlchemyJobRepository:
        return SqlAlchemyJobRepository(self._session_factory)

    @cached_property
    def application_repository(self) -> SqlAlchemyApplicationRepository:
        return SqlAlchemyApplicationRepository(self._session_factory)

    @cached_property
    def audit(self) -> AuditTrail:
        return AuditTrail(self._session_factory, clock=self.clock)

    @cached_property
    def login_attempts(self) -> LoginAttemptsTracker:
        return LoginAttemptsTracker(
            max_attempts=self.config.auth.login_max_attempts,
            lockout_seconds=self.config.auth.login_lockout_seconds,
            clock=lambda: self.clock().timestamp(),
        )

    @cached_property
    def token_service(self) -> TokenService:
        auth = self.config.auth
        return TokenService(
            self.config.secret_key,
            users=self.user_repository,
            refresh_tokens=self.refresh_token_repository,
            access_ttl=timedelta(minutes=auth.access_token_ttl_minutes),
            refresh_ttl=timedelta(days=auth.refresh_token_ttl_days),
            algorithm=auth.jwt_algorithm,
            clock=self.clock,
        )

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(
            users=self.user_repository,
            tokens=self.token_service,
            password_hasher=self.password_hasher,
            verification_ttl=timedelta(hours=self.config.auth.verification_token_ttl_hours),
            clock=self.clock,
        )

    @cached_property
    def login_user_use_case(self) -> LoginUserUseCase:
        return LoginUserUseCase(
            users=self.user_repository,
            tokens=self.token_service,
            password_hasher=self.password_hasher,
            attempts=self.login_attempts,
        )

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            tokens=self.token_service,
            audit=self.audit,
            register_use_case=self.register_user_use_case,
            login_use_case=self.login_user_use_case,
            logout_use_case=LogoutUserUseCase(tokens=self.token_service),
            refresh_use_case=RefreshSessionUseCase(tokens=self.token_service),
            verify_email_use_case=VerifyEmailUseCase(users=self.user_repository, clock=self.clock),
            change_password_use_case=ChangePasswordUseCase(
                users=self.user_repository,
                tokens=self.token_service,
                password_hasher=self.password_hasher,
            ),
            get_current_user_use_case=GetCurrentUserUseCase(users=self.user_repository),
            change_email_use_case=ChangeEmailUseCase(
                users=self.user_repository,
                password_hasher=self.password_hasher,
                verification_ttl=timedelta(hours=self.config.auth.verification_token_ttl_hours),
                clock=self.clock,
            ),
            delete_account_use_case=DeleteAccountUseCase(
                users=self.user_repository,
                tokens=self.token_service,
                password_hasher=self.password_hasher,
            ),
        )

    @cached_property
    def jobs_controller(self) -> JobsController:
        return JobsController(
            tokens=self.token_service,
            audit=self.audit,
            create_job_use_case=CreateJobUseCase(jobs=self.job_repository, clock=self.clock),
            list_jobs_use_case=ListJobsUseCase(jobs=self.job_repository),
            list_employer_jobs_use_case=ListEmployerJobsUseCase(jobs=self.job_repository),
            apply_use_case=ApplyToJobUseCase(
                jobs=self.job_repository,
                applications=self.application_repository,
                clock=self.clock,
            ),
            list_applications_use_case=ListCandidateApplicationsUseCase(
                applications=self.application_repository
            ),
        )

    @cached_property
    def misc_controller(self) -> MiscController:
        return MiscController(
            engine=self.engine,
            metrics_enabled=self.config.observability.metrics_enabled,
        )


def _bound_engine(session_factory: Callable[[], Session] | None) -> Engine | None:
    if isinstance(session_factory, sessionmaker):
        bind = session_factory.kw.get("bind")
        if isinstance(bind, Engine):
            return bind
    return None
