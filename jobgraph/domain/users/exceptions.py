# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterable
from http import HTTPStatus

from jobgraph.shared.errors.base import DomainError

from .entities import Role, describe_roles


class NoTokenError(DomainError):
    code = "NO_TOKEN"
    status = HTTPStatus.UNAUTHORIZED
    message = "No authentication token provided"


class InvalidTokenError(DomainError):
    code = "INVALID_TOKEN"
    status = HTTPStatus.UNAUTHORIZED
    message = "Invalid or expired token"


class ExpiredTokenError(DomainError):
    code = "TOKEN_EXPIRED"
    status = HTTPStatus.UNAUTHORIZED
    message = "Token has expired"


class UnknownTokenError(DomainError):
    code = "INVALID_TOKEN"
    status = HTTPStatus.UNAUTHORIZED
    message = "Invalid refresh token"


class RevokedTokenError(DomainError):
    code = "TOKEN_REVOKED"
    status = HTTPStatus.UNAUTHORIZED
    message = "Refresh token has been revoked"


class UnauthorizedError(DomainError):
    code = "UNAUTHORIZED"
    status = HTTPStatus.UNAUTHORIZED
    message = "Authentication required"


class ForbiddenError(DomainError):
    code = "FORBIDDEN"
    status = HTTPStatus.FORBIDDEN

    def __init__(self, required: Iterable[Role]) -> None:
        required = tuple(required)
        super().__init__(
            f"Access denied. Required role: {describe_roles(required)}",
            details={"required_roles": [role.value for role in required]},
        )


class UserAlreadyExistsError(DomainError):
    code = "USER_EXISTS"
    status = HTTPStatus.CONFLICT
    message = "User with this email already exists"


class SameEmailError(DomainError):
    code = "SAME_EMAIL"
    status = HTTPStatus.BAD_REQUEST
    message = "New email is the same as current email"


class EmailInUseError(DomainError):
    code = "EMAIL_EXISTS"
    status = HTTPStatus.CONFLICT
    message = "Email is already in use"


class InvalidCredentialsError(DomainError):
    code = "INVALID_CREDENTIALS"
    status = HTTPStatus.UNAUTHORIZED
    message = "Invalid email or password"


class InvalidPasswordError(DomainError):
    code = "INVALID_PASSWORD"
    status = HTTPStatus.UNAUTHORIZED
    message = "Current password is incorrect"


class UserNotFoundError(DomainError):
    code = "USER_NOT_FOUND"
    status = HTTPStatus.NOT_FOUND
    message = "User not found"


class VerificationTokenInvalidError(DomainError):
    code = "INVALID_TOKEN"
    status = HTTPStatus.BAD_REQUEST
    message = "Invalid or expired verification token"


class VerificationTokenExpiredError(DomainError):
    code = "TOKEN_EXPIRED"
    status = HTTPStatus.BAD_REQUEST
    message = "Verification token has expired"


class AccountLockedError(DomainError):
    code = "ACCOUNT_LOCKED"
    status = HTTPStatus.TOO_MANY_REQUESTS
    message = "Too many failed login attempts, try again later"

    def __init__(self, lockout_remaining: float = 0) -> None:
        super().__init__(details={"lockout_remaining_seconds": round(lockout_remaining, 1)})
