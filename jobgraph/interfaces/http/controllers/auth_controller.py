# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, Response

from jobgraph.application.services.token_service import TokenService
from jobgraph.application.use_cases.users.change_email import ChangeEmailUseCase
from jobgraph.application.use_cases.users.change_password import ChangePasswordUseCase
from jobgraph.application.use_cases.users.delete_account import DeleteAccountUseCase
from jobgraph.application.use_cases.users.get_current_user import GetCurrentUserUseCase
from jobgraph.application.use_cases.users.login_user import LoginUserUseCase
from jobgraph.application.use_cases.users.logout_user import LogoutUserUseCase
from jobgraph.application.use_cases.users.refresh_session import RefreshSessionUseCase
from jobgraph.application.use_cases.users.register_user import RegisterUserUseCase
from jobgraph.application.use_cases.users.verify_email import VerifyEmailUseCase
from jobgraph.domain.users.exceptions import AccountLockedError
from jobgraph.infrastructure.audit import AuditAction, AuditTrail
from jobgraph.infrastructure.observability import record_refresh
from jobgraph.interfaces.http.dto.auth import (
    AuthSuccessDTO,
    ChangeEmailRequestDTO,
    ChangePasswordRequestDTO,
    DeleteAccountRequestDTO,
    LoginRequestDTO,
    LogoutRequestDTO,
    RefreshRequestDTO,
    RegisterRequestDTO,
    TokenPairDTO,
    UserDTO,
    VerifyEmailRequestDTO,
)
from jobgraph.interfaces.http.pipeline import Authenticate, RequestContext, guarded
from jobgraph.shared.errors import AppError, success_response
from jobgraph.shared.logging import logger
from jobgraph.shared.middleware.rate_limit import rate_limit

from ._request import client_context, parse_body


class AuthController:
    def __init__(
        self,
        *,
        tokens: TokenService,
        audit: AuditTrail,
        register_use_case: RegisterUserUseCase,
        login_use_case: LoginUserUseCase,
        logout_use_case: LogoutUserUseCase,
        refresh_use_case: RefreshSessionUseCase,
        verify_email_use_case: VerifyEmailUseCase,
        change_password_use_case: ChangePasswordUseCase,
        get_current_user_use_case: GetCurrentUserUseCase,
        change_email_use_case: ChangeEmailUseCase,
        delete_account_use_case: DeleteAccountUseCase,
    ) -> None:
        self._authenticate = Authenticate(tokens)
        self._audit = audit
        self._register_use_case = register_use_case
        self._login_use_case = login_use_case
        self._logout_use_case = logout_use_case
        self._refresh_use_case = refresh_use_case
        self._verify_email_use_case = verify_email_use_case
        self._change_password_use_case = change_password_use_case
        self._get_current_user_use_case = get_current_user_use_case
        self._change_email_use_case = change_email_use_case
        self._delete_account_use_case = delete_account_use_case

    @rate_limit(limit=5, window_seconds=60.0)
    def register(self) -> tuple[Response, int]:
        dto = parse_body(RegisterRequestDTO)
        context = client_context()

        user, tokens = self._register_use_case.execute(
            email=dto.email,
            password=dto.password,
            first_name=dto.first_name,
            last_name=dto.last_name,
            role=dto.role,
            preferred_first_name=dto.preferred_first_name,
            preferred_last_name=dto.preferred_last_name,
            context=context,
        )

        self._audit.record(
            AuditAction.REGISTER,
            user_id=user.id,
            ip_address=context.ip_address,
            details={"role": user.role.value},
        )
        logger.info(f"auth.register: ok user_id={user.id}")
        payload = AuthSuccessDTO.build(user, tokens).model_dump(by_alias=True, mode="json")
        return success_response(payload, HTTPStatus.CREATED)

    @rate_limit(limit=10, window_seconds=60.0)
    def login(self) -> tuple[Response, int]:
        dto = parse_body(LoginRequestDTO)
        context = client_context()

        try:
            user, tokens = self._login_use_case.execute(dto.email, dto.password, context)
        except AppError as exc:
            action = (
                AuditAction.LOGIN_LOCKED
                if isinstance(exc, AccountLockedError)
                else AuditAction.LOGIN_FAILED
            )
            self._audit.record(
                action,
                ip_address=context.ip_address,
                details={"email": dto.email, "error": exc.code},
                success=False,
            )
            raise

        self._audit.record(AuditAction.LOGIN_SUCCESS, user_id=user.id, ip_address=context.ip_address)
        logger.info(f"auth.login: ok user_id={user.id}")
        payload = AuthSuccessDTO.build(user, tokens).model_dump(by_alias=True, mode="json")
        return success_response(payload)

    @rate_limit(limit=30, window_seconds=60.0)
    def refresh(self) -> tuple[Response, int]:
        dto = parse_body(RefreshRequestDTO)
        context = client_context()

        try:
            tokens = self._refresh_use_case.execute(dto.refresh_token, context)
        except AppError as exc:
            record_refresh(exc.code.lower())
            self._audit.record(
                AuditAction.TOKEN_REFRESH_FAILED,
                ip_address=context.ip_address,
                details={"error": exc.code},
                success=False,
            )
            raise

        record_refresh("rotated")
        self._audit.record(AuditAction.TOKEN_REFRESHED, ip_address=context.ip_address)
        return success_response(TokenPairDTO.from_domain(tokens).model_dump(by_alias=True))

    def logout(self) -> tuple[Response, int]:
        dto = parse_body(LogoutRequestDTO)
        self._logout_use_case.execute(dto.refresh_token)
        self._audit.record(AuditAction.LOGOUT, ip_address=client_context().ip_address)
        logger.info("auth.logout: ok")
        return success_response({"message": "Logged out successfully"})

    def verify_email(self) -> tuple[Response, int]:
        dto = parse_body(VerifyEmailRequestDTO)
        user = self._verify_email_use_case.execute(dto.token)
        self._audit.record(AuditAction.EMAIL_VERIFIED, user_id=user.id)
        return success_response({"message": "Email verified successfully", "email": user.email})

    def me(self, context: RequestContext) -> tuple[Response, int]:
        user = self._get_current_user_use_case.execute(context.user_id)
        return success_response(UserDTO.from_domain(user).model_dump(by_alias=True, mode="json"))

    def change_password(self, context: RequestContext) -> tuple[Response, int]:
        dto = parse_body(ChangePasswordRequestDTO)
        revoked = self._change_password_use_case.execute(
            context.user_id, dto.current_password, dto.new_password
        )
        self._audit.record(
            AuditAction.PASSWORD_CHANGED,
            user_id=context.user_id,
            ip_address=client_context().ip_address,
            details={"revoked_sessions": revoked},
        )
        return success_response({"message": "Password changed successfully"})

    def change_email(self, context: RequestContext) -> tuple[Response, int]:
        dto = parse_body(ChangeEmailRequestDTO)
        user = self._change_email_use_case.execute(context.user_id, dto.new_email, dto.password)
        self._audit.record(
            AuditAction.EMAIL_CHANGED,
            user_id=user.id,
            ip_address=client_context().ip_address,
            details={"email": user.email},
        )
        return success_response({"message": "Email changed successfully", "newEmail": user.email})

    def delete_account(self, context: RequestContext) -> tuple[Response, int]:
        dto = parse_body(DeleteAccountRequestDTO)
        revoked = self._delete_account_use_case.execute(context.user_id, dto.password)
        self._audit.record(
            AuditAction.ACCOUNT_DELETED,
            user_id=context.user_id,
            ip_address=client_context().ip_address,
            details={"revoked_sessions": revoked},
        )
        return success_response({"message": "Account deleted successfully"})

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__, url_prefix="/api/v1/auth")
        bp.add_url_rule("/register", view_func=self.register, methods=["POST"])
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        bp.add_url_rule("/refresh", view_func=self.refresh, methods=["POST"])
        bp.add_url_rule("/logout", view_func=self.logout, methods=["POST"])
        bp.add_url_rule("/verify-email", view_func=self.verify_email, methods=["POST"])
        bp.add_url_rule(
            "/me", endpoint="me", view_func=guarded(self.me, self._authenticate), methods=["GET"]
        )
        bp.add_url_rule(
            "/change-password",
            endpoint="change_password",
            view_func=guarded(self.change_password, self._authenticate),
            methods=["PUT"],
        )
        bp.add_url_rule(
            "/change-email",
            endpoint="change_email",
            view_func=guarded(self.change_email, self._authenticate),
            methods=["PUT"],
        )
        bp.add_url_rule(
            "/account",
            endpoint="delete_account",
            view_func=guarded(self.delete_account, self._authenticate),
            methods=["DELETE"],
        )
        return bp
