# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobgraph.domain.jobs.entities import ApplicationStatus, JobPosting, JobStatus
from jobgraph.domain.jobs.entities import JobApplication as DomainJobApplication
from jobgraph.domain.jobs.exceptions import DuplicateApplicationError
from jobgraph.domain.jobs.repositories import ApplicationRepository, JobRepository
from jobgraph.infrastructure.db.models import Job, JobApplication
from jobgraph.infrastructure.repositories.storage_errors import as_utc, storage_errors
from jobgraph.infrastructure.unit_of_work import unit_of_work_scope


def _job_to_domain(row: Job) -> JobPosting:
    return JobPosting(
        id=row.id,
        posted_by=row.posted_by,
        title=row.title,
        description=row.description,
        created_at=as_utc(row.created_at),
        status=JobStatus(row.status),
        city=row.city,
        remote_option=row.remote_option,
        employment_type=row.employment_type,
        salary_min=row.salary_min,
        salary_max=row.salary_max,
    )


def _application_to_domain(row: JobApplication) -> DomainJobApplication:
    return DomainJobApplication(
        id=row.id,
        job_id=row.job_id,
        candidate_id=row.user_id,
        applied_at=as_utc(row.applied_at),
        cover_letter=row.cover_letter,
        status=ApplicationStatus(row.status),
    )


class SqlAlchemyJobRepository(JobRepository):
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    @storage_errors
    def add(self, job: JobPosting) -> JobPosting:
        with unit_of_work_scope(self._session_factory) as session:
            row = Job(
                posted_by=job.posted_by,
                title=job.title,
                description=job.description,
                status=job.status.value,
                city=job.city,
                remote_option=job.remote_option,
                employment_type=job.employment_type,
                salary_min=job.salary_min,
                salary_max=job.salary_max,
                created_at=job.created_at,
            )
            session.add(row)
            session.flush()
            return _job_to_domain(row)

    @storage_errors
    def find_by_id(self, job_id: int) -> JobPosting | None:
        with unit_of_work_scope(self._session_factory) as session:
            row = session.get(Job, job_id)
            return _job_to_domain(row) if row else None

    @storage_errors
    def list_active(self, *, limit: int, offset: int) -> Sequence[JobPosting]:
        with unit_of_work_scope(self._session_factory) as session:
            rows = session.scalars(
                select(Job)
                .where(Job.status == JobStatus.ACTIVE.value)
                .order_by(Job.created_at.desc(), Job.id.desc())
                .limit(limit)
                .offset(offset)
            ).all()
            return [_job_to_domain(row) for row in rows]

    @storage_errors
    def list_for_employer(self, employer_id: int) -> Sequence[JobPosting]:
        with unit_of_work_scope(self._session_factory) as session:
            rows = session.scalars(
                select(Job).where(Job.posted_by == employer_id).order_by(Job.id.desc())
            ).all()
            return [_job_to_domain(row) for row in rows]


class SqlAlchemyApplicationRepository(ApplicationRepository):
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    @storage_errors
    def add(self, application: DomainJobApplication) -> DomainJobApplication:
        try:
            with unit_of_work_scope(self._session_factory) as session:
                row = JobApplication(
                    job_id=application.job_id,
                    user_id=application.candidate_id,
                    cover_letter=application.cover_letter,
                    status=application.status.value,
                    applied_at=application.applied_at,
                )
                session.add(row)
                session.flush()
                return _application_to_domain(row)
        except IntegrityError:
            raise DuplicateApplicationError() from None

    @storage_errors
    def list_for_candidate(self, candidate_id: int) -> Sequence[DomainJobApplication]:
        with unit_of_work_scope(self._session_factory) as session:
            rows = session.scalars(
                select(JobApplication)
                .where(JobApplication.user_id == candidate_id)
                .order_by(JobApplication.applied_at.desc(), JobApplication.id.desc())
            ).all()
            return [_application_to_domain(row) for row in rows]
