# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Sequence

from jobgraph.application.services.token_service import utc_now
from jobgraph.domain.jobs.entities import JobApplication
from jobgraph.domain.jobs.exceptions import JobClosedError, JobNotFoundError
from jobgraph.domain.jobs.repositories import ApplicationRepository, JobRepository
from jobgraph.domain.users.repositories import Clock
from jobgraph.shared.logging import logger


class ApplyToJobUseCase:
    def __init__(
        self,
        *,
        jobs: JobRepository,
        applications: ApplicationRepository,
        clock: Clock = utc_now,
    ) -> None:
        self._jobs = jobs
        self._applications = applications
        self._clock = clock

    def execute(self, candidate_id: int, job_id: int, cover_letter: str | None = None) -> JobApplication:
        job = self._jobs.find_by_id(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        if not job.accepts_applications():
            raise JobClosedError()

        application = self._applications.add(
            JobApplication(
                id=0,
                job_id=job_id,
                candidate_id=candidate_id,
                applied_at=self._clock(),
                cover_letter=cover_letter,
            )
        )
        logger.info(f"jobs: candidate={candidate_id} applied to job={job_id}")
        return application


class ListCandidateApplicationsUseCase:
    def __init__(self, *, applications: ApplicationRepository) -> None:
        self._applications = applications

    def execute(self, candidate_id: int) -> Sequence[JobApplication]:
        return self._applications.list_for_candidate(candidate_id)
