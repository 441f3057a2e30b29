# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Domain layer for the JobGraph backend."""

from .exceptions import InvariantViolation
from .jobs.entities import ApplicationStatus, JobApplication, JobPosting, JobStatus
from .users.entities import ClientContext, Identity, RefreshToken, Role, TokenPair, User

__all__ = [
    "ApplicationStatus",
    "ClientContext",
    "Identity",
    "InvariantViolation",
    "JobApplication",
    "JobPosting",
    "JobStatus",
    "RefreshToken",
    "Role",
    "TokenPair",
    "User",
]
