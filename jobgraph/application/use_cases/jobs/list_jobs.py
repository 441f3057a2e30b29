from __future__ import annotations

from collections.abc import Sequence

from jobgraph.domain.jobs.entities import JobPosting
from jobgraph.domain.jobs.repositories import JobRepository

MAX_PAGE_SIZE = 100


class ListJobsUseCase:
    def __init__(self, *, jobs: JobRepository) -> None:
        self._jobs = jobs

    def execute(self, *, limit: int = 20, offset: int = 0) -> Sequence[JobPosting]:
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        return self._jobs.list_active(limit=limit, offset=max(offset, 0))


class ListEmployerJobsUseCase:
    def __init__(self, *, jobs: JobRepository) -> None:
        self._jobs = jobs

    def execute(self, employer_id: int) -> Sequence[JobPosting]:
        return self._jobs.list_for_employer(employer_id)
