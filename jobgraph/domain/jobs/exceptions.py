# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from jobgraph.shared.errors.base import DomainError


class JobNotFoundError(DomainError):
    code = "JOB_NOT_FOUND"
    status = HTTPStatus.NOT_FOUND
    message = "Job not found"

    def __init__(self, job_id: int) -> None:
        super().__init__(details={"job_id": job_id})


class JobClosedError(DomainError):
    code = "JOB_NOT_ACTIVE"
    status = HTTPStatus.CONFLICT
    message = "This job is not accepting applications"


class DuplicateApplicationError(DomainError):
    code = "ALREADY_APPLIED"
    status = HTTPStatus.CONFLICT
    message = "You have already applied to this job"
