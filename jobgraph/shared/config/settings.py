# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_SECTION_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    validate_by_name=True,
)


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///jobgraph.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(10.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")
    statement_timeout_ms: int = Field(5000, ge=0, alias="DATABASE_STATEMENT_TIMEOUT_MS")

    model_config = _SECTION_CONFIG


class AuthConfig(BaseSettings):
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_ttl_minutes: int = Field(15, ge=1, alias="ACCESS_TOKEN_TTL_MINUTES")
    refresh_token_ttl_days: int = Field(7, ge=1, alias="REFRESH_TOKEN_TTL_DAYS")
    verification_token_ttl_hours: int = Field(24, ge=1, alias="VERIFICATION_TOKEN_TTL_HOURS")
    login_max_attempts: int = Field(5, ge=1, alias="LOGIN_MAX_ATTEMPTS")
    login_lockout_seconds: float = Field(15 * 60, ge=1.0, alias="LOGIN_LOCKOUT_SECONDS")

    model_config = _SECTION_CONFIG

    @field_validator("jwt_algorithm", mode="after")
    @classmethod
    def _only_hmac(cls, value: str) -> str:
        # The secret is a shared key, asymmetric algorithms would need a key pair.
        if value not in ("HS256", "HS384", "HS512"):
            raise ValueError("JWT_ALGORITHM must be one of HS256, HS384, HS512")
        return value


class ObservabilityConfig(BaseSettings):
    metrics_enabled: bool = Field(True, alias="METRICS_ENABLED")
    service_name: str = Field("jobgraph-auth", alias="SERVICE_NAME")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_file: str | None = Field(None, alias="LOG_FILE")

    model_config = _SECTION_CONFIG


class SecurityConfig(BaseSettings):
    # CORS
    allowed_origins: Annotated[list[str], NoDecode] = Field(["http://localhost:5173"], alias="ALLOWED_ORIGINS")

    # Rate limiting
    enable_rate_limit: bool = Field(True, alias="ENABLE_RATE_LIMIT")
    rate_limit_requests: int = Field(10, alias="RL_LIMIT")
    rate_limit_window: float = Field(60.0, alias="RL_WINDOW")

    # Number of reverse proxies in front of the app whose X-Forwarded-For is trusted
    trusted_proxy_count: int = Field(0, ge=0, alias="TRUSTED_PROXY_COUNT")

    # HSTS
    enable_hsts: bool = Field(False, alias="ENABLE_HSTS")

    model_config = _SECTION_CONFIG

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("enable_rate_limit", "enable_hsts", mode="before")
    @classmethod
    def _parse_bool(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)


_WEAK_SECRETS = frozenset({"", "dev", "development", "test", "secret", "change-me", "your-secret-key"})
_MIN_SECRET_LENGTH = 32


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    secret_key: str = Field("dev", alias="SECRET_KEY")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")

    database: DatabaseConfig = Field(default_factory=lambda: DatabaseConfig())  # type: ignore[call-arg]
    auth: AuthConfig = Field(default_factory=lambda: AuthConfig())  # type: ignore[call-arg]
    observability: ObservabilityConfig = Field(default_factory=lambda: ObservabilityConfig())  # type: ignore[call-arg]
    security: SecurityConfig = Field(default_factory=lambda: SecurityConfig())  # type: ignore[call-arg]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)

    @model_validator(mode="after")
    def _check_production(self) -> "AppConfig":
        if not self.is_production():
            return self

        # Every access token is signed with this key; refuse to boot with a guessable one.
        if self.secret_key.lower() in _WEAK_SECRETS or len(self.secret_key) < _MIN_SECRET_LENGTH:
            print(
                "\n❌ SECRET_KEY is missing or weak. Access tokens could be forged.\n"
                f"   Use at least {_MIN_SECRET_LENGTH} random characters, e.g.\n"
                "   python -c \"import secrets; print(secrets.token_urlsafe(48))\"\n",
                file=sys.stderr,
            )
            sys.exit(1)

        for warning in self.production_warnings():
            print(f"⚠️  {warning}", file=sys.stderr)
        return self

    def production_warnings(self) -> list[str]:
        warnings = []
        if self.database.url.startswith("sqlite"):
            warnings.append("DATABASE_URL points at SQLite; refresh rotation relies on its file lock")
        if self.auth.access_token_ttl_minutes > 60:
            warnings.append(
                f"ACCESS_TOKEN_TTL_MINUTES={self.auth.access_token_ttl_minutes}: "
                "access tokens cannot be revoked before they expire"
            )
        if "*" in self.security.allowed_origins:
            warnings.append("ALLOWED_ORIGINS contains '*'")
        if not self.security.enable_rate_limit:
            warnings.append("rate limiting on login, register and refresh is disabled")
        if not self.security.enable_hsts:
            warnings.append("HSTS is disabled")
        return warnings

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()  # type: ignore[call-arg]
