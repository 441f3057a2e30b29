# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic_core import PydanticCustomError

from jobgraph.domain.users.entities import Role, TokenPair, User
from jobgraph.shared.errors.validation_types import ValidationErrorType

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$")


# Password fields stay plain `str`: surrounding whitespace is part of the password.
Trimmed = Annotated[str, StringConstraints(strip_whitespace=True)]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


def _check_email(value: str) -> str:
    if not EMAIL_PATTERN.match(value):
        raise PydanticCustomError(
            ValidationErrorType.EMAIL_INVALID,
            "Please provide a valid email address",
            {},
        )
    return value.lower()


def _check_password_strength(value: str) -> str:
    if not PASSWORD_PATTERN.match(value):
        raise PydanticCustomError(
            ValidationErrorType.PASSWORD_WEAK,
            "Password must be at least 8 characters with uppercase, lowercase, "
            "number and special character",
            {"min_length": 8},
        )
    return value


class RegisterRequestDTO(_CamelModel):
    email: Trimmed = Field(max_length=255)
    password: str = Field(max_length=128)
    first_name: Trimmed = Field(alias="firstName", max_length=100)
    last_name: Trimmed = Field(alias="lastName", max_length=100)
    role: Role
    preferred_first_name: Trimmed | None = Field(None, alias="preferredFirstName", max_length=100)
    preferred_last_name: Trimmed | None = Field(None, alias="preferredLastName", max_length=100)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _check_email(value)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return _check_password_strength(value)

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError(ValidationErrorType.NAME_INVALID, "Name cannot be empty", {})
        return value

    @field_validator("preferred_first_name", "preferred_last_name")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        return value or None

    @field_validator("role", mode="before")
    @classmethod
    def validate_role(cls, value: object) -> Role:
        try:
            return Role(value)
        except ValueError:
            raise PydanticCustomError(
                ValidationErrorType.ROLE_INVALID,
                "Role must be either candidate or employer",
                {"allowed": [role.value for role in Role]},
            ) from None


class LoginRequestDTO(_CamelModel):
    email: Trimmed = Field(max_length=255)
    password: str = Field(min_length=1, max_length=128)  # No strength check on login

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _check_email(value)


class RefreshRequestDTO(_CamelModel):
    refresh_token: Trimmed = Field(alias="refreshToken", min_length=1, max_length=256)


class LogoutRequestDTO(_CamelModel):
    refresh_token: Trimmed | None = Field(None, alias="refreshToken", max_length=256)


class VerifyEmailRequestDTO(_CamelModel):
    token: Trimmed = Field(min_length=1, max_length=128)


class ChangePasswordRequestDTO(_CamelModel):
    current_password: str = Field(alias="currentPassword", min_length=1, max_length=128)
    new_password: str = Field(alias="newPassword", max_length=128)

    @field_validator("new_password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return _check_password_strength(value)


class ChangeEmailRequestDTO(_CamelModel):
    new_email: Trimmed = Field(alias="newEmail", max_length=255)
    password: str = Field(min_length=1, max_length=128)

    @field_validator("new_email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _check_email(value)


class DeleteAccountRequestDTO(_CamelModel):
    password: str = Field(min_length=1, max_length=128)


class UserDTO(_CamelModel):
    id: int
    email: str
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    preferred_first_name: str | None = Field(None, alias="preferredFirstName")
    preferred_last_name: str | None = Field(None, alias="preferredLastName")
    display_name: str = Field(alias="displayName")
    role: Role
    email_verified: bool = Field(alias="emailVerified")
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_domain(cls, user: User) -> UserDTO:
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            preferred_first_name=user.preferred_first_name,
            preferred_last_name=user.preferred_last_name,
            display_name=f"{user.display_first_name} {user.display_last_name}",
            role=user.role,
            email_verified=user.email_verified,
            created_at=user.created_at,
        )


class TokenPairDTO(_CamelModel):
    access_token: str = Field(alias="accessToken")
    refresh_token: str = Field(alias="refreshToken")

    @classmethod
    def from_domain(cls, tokens: TokenPair) -> TokenPairDTO:
        return cls(access_token=tokens.access_token, refresh_token=tokens.refresh_token)


class AuthSuccessDTO(TokenPairDTO):
    user: UserDTO

    @classmethod
    def build(cls, user: User, tokens: TokenPair) -> AuthSuccessDTO:
        return cls(
            user=UserDTO.from_domain(user),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )
