# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass

from jobgraph.application.services.token_service import utc_now
from jobgraph.domain.jobs.entities import JobPosting, JobStatus
from jobgraph.domain.jobs.repositories import JobRepository
from jobgraph.domain.users.repositories import Clock
from jobgraph.shared.logging import logger


@dataclass(slots=True, frozen=True)
class CreateJobInput:
    title: str
    description: str
    city: str | None = None
    remote_option: str | None = None
    employment_type: str | None = None
    salary_min: int | None = None
    salary_max: int | None = None
    status: JobStatus = JobStatus.ACTIVE


class CreateJobUseCase:
    def __init__(self, *, jobs: JobRepository, clock: Clock = utc_now) -> None:
        self._jobs = jobs
        self._clock = clock

    def execute(self, employer_id: int, data: CreateJobInput) -> JobPosting:
        job = JobPosting(
            id=0,
            posted_by=employer_id,
            title=data.title.strip(),
            description=data.description,
            created_at=self._clock(),
            status=data.status,
            city=data.city,
            remote_option=data.remote_option,
            employment_type=data.employment_type,
            salary_min=data.salary_min,
            salary_max=data.salary_max,
        )
        persisted = self._jobs.add(job)
        logger.info(f"jobs: created job={persisted.id} employer={employer_id}")
        return persisted
