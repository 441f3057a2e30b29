from .base import (
    AppError,
    DomainError,
    InfrastructureError,
    InternalError,
    RateLimitedError,
    ValidationError,
)
from .http import handle_app_error, register_error_handler, success_response

__all__ = [
    "AppError",
    "DomainError",
    "InfrastructureError",
    "InternalError",
    "RateLimitedError",
    "ValidationError",
    "handle_app_error",
    "register_error_handler",
    "success_response",
]
