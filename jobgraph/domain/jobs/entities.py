# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from jobgraph.domain.exceptions import InvariantViolation


class JobStatus(StrEnum):
    DRAFT = "draft"
    ACTIVE = "active"
    CLOSED = "closed"


class ApplicationStatus(StrEnum):
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"
    ACCEPTED = "accepted"


@dataclass(slots=True, frozen=True)
class JobPosting:
    """A job offered by an employer."""

    id: int
    posted_by: int
    title: str
    description: str
    created_at: datetime
    status: JobStatus = JobStatus.ACTIVE
    city: str | None = None
    remote_option: str | None = None
    employment_type: str | None = None
    salary_min: int | None = None
    salary_max: int | None = None

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise InvariantViolation("title must not be empty", field="title")
        for fld in ("salary_min", "salary_max"):
            value = getattr(self, fld)
            if value is not None and value < 0:
                raise InvariantViolation("salary must be non-negative", field=fld)
        if (
            self.salary_min is not None
            and self.salary_max is not None
            and self.salary_min > self.salary_max
        ):
            raise InvariantViolation("salary_min must be <= salary_max", field="salary_min")

    def accepts_applications(self) -> bool:
        return self.status is JobStatus.ACTIVE


@dataclass(slots=True, frozen=True)
class JobApplication:
    """A candidate's application to a posting; one per candidate and job."""

    id: int
    job_id: int
    candidate_id: int
    applied_at: datetime
    cover_letter: str | None = None
    status: ApplicationStatus = ApplicationStatus.SUBMITTED
