# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .services.token_service import TokenService
from .use_cases.jobs.apply_to_job import ApplyToJobUseCase, ListCandidateApplicationsUseCase
from .use_cases.jobs.create_job import CreateJobInput, CreateJobUseCase
from .use_cases.jobs.list_jobs import ListEmployerJobsUseCase, ListJobsUseCase
from .use_cases.users.change_email import ChangeEmailUseCase
from .use_cases.users.change_password import ChangePasswordUseCase
from .use_cases.users.delete_account import DeleteAccountUseCase
from .use_cases.users.get_current_user import GetCurrentUserUseCase
from .use_cases.users.login_user import LoginUserUseCase
from .use_cases.users.logout_user import LogoutUserUseCase
from .use_cases.users.refresh_session import RefreshSessionUseCase
from .use_cases.users.register_user import RegisterUserUseCase
from .use_cases.users.verify_email import VerifyEmailUseCase

__all__ = [
    "ApplyToJobUseCase",
    "ChangeEmailUseCase",
    "ChangePasswordUseCase",
    "CreateJobInput",
    "CreateJobUseCase",
    "DeleteAccountUseCase",
    "GetCurrentUserUseCase",
    "ListCandidateApplicationsUseCase",
    "ListEmployerJobsUseCase",
    "ListJobsUseCase",
    "LoginUserUseCase",
    "LogoutUserUseCase",
    "RefreshSessionUseCase",
    "RegisterUserUseCase",
    "TokenService",
    "VerifyEmailUseCase",
]
