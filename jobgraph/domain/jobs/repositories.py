# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .entities import JobApplication, JobPosting


class JobRepository(Protocol):
    def add(self, job: JobPosting) -> JobPosting: ...
    def find_by_id(self, job_id: int) -> JobPosting | None: ...
    def list_active(self, *, limit: int, offset: int) -> Sequence[JobPosting]: ...
    def list_for_employer(self, employer_id: int) -> Sequence[JobPosting]: ...


class ApplicationRepository(Protocol):
    def add(self, application: JobApplication) -> JobApplication:
        """Persist ``application``; raises DuplicateApplicationError on a repeat."""
        ...

    def list_for_candidate(self, candidate_id: int) -> Sequence[JobApplication]: ...
