# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, Response

from jobgraph.application.services.token_service import TokenService
from jobgraph.application.use_cases.jobs.apply_to_job import (
    ApplyToJobUseCase,
    ListCandidateApplicationsUseCase,
)
from jobgraph.application.use_cases.jobs.create_job import CreateJobInput, CreateJobUseCase
from jobgraph.application.use_cases.jobs.list_jobs import ListEmployerJobsUseCase, ListJobsUseCase
from jobgraph.domain.users.entities import Role
from jobgraph.infrastructure.audit import AuditAction, AuditTrail
from jobgraph.interfaces.http.dto.jobs import (
    ApplicationDTO,
    ApplyRequestDTO,
    CreateJobRequestDTO,
    JobDTO,
    ListJobsQueryDTO,
)
from jobgraph.interfaces.http.pipeline import Authenticate, RequestContext, guarded, require_role
from jobgraph.shared.errors import success_response

from ._request import parse_body, parse_query


class JobsController:
    """Job postings; the routes mainly exist to put role gating to use."""

    def __init__(
        self,
        *,
        tokens: TokenService,
        audit: AuditTrail,
        create_job_use_case: CreateJobUseCase,
        list_jobs_use_case: ListJobsUseCase,
        list_employer_jobs_use_case: ListEmployerJobsUseCase,
        apply_use_case: ApplyToJobUseCase,
        list_applications_use_case: ListCandidateApplicationsUseCase,
    ) -> None:
        self._authenticate = Authenticate(tokens)
        self._audit = audit
        self._create_job = create_job_use_case
        self._list_jobs = list_jobs_use_case
        self._list_employer_jobs = list_employer_jobs_use_case
        self._apply = apply_use_case
        self._list_applications = list_applications_use_case

    def list_jobs(self) -> tuple[Response, int]:
        query = parse_query(ListJobsQueryDTO)
        jobs = self._list_jobs.execute(limit=query.limit, offset=query.offset)
        return success_response(
            {"jobs": [JobDTO.from_domain(job).model_dump(by_alias=True, mode="json") for job in jobs]}
        )

    def create_job(self, context: RequestContext) -> tuple[Response, int]:
        dto = parse_body(CreateJobRequestDTO)
        job = self._create_job.execute(
            context.user_id,
            CreateJobInput(
                title=dto.title,
                description=dto.description,
                city=dto.city,
                remote_option=dto.remote_option,
                employment_type=dto.employment_type,
                salary_min=dto.salary_min,
                salary_max=dto.salary_max,
                status=dto.status,
            ),
        )
        self._audit.record(AuditAction.JOB_CREATED, user_id=context.user_id, details={"job_id": job.id})
        return success_response(
            JobDTO.from_domain(job).model_dump(by_alias=True, mode="json"), HTTPStatus.CREATED
        )

    def my_jobs(self, context: RequestContext) -> tuple[Response, int]:
        jobs = self._list_employer_jobs.execute(context.user_id)
        return success_response(
            {"jobs": [JobDTO.from_domain(job).model_dump(by_alias=True, mode="json") for job in jobs]}
        )

    def apply(self, context: RequestContext, job_id: int) -> tuple[Response, int]:
        dto = parse_body(ApplyRequestDTO)
        application = self._apply.execute(context.user_id, job_id, dto.cover_letter)
        self._audit.record(AuditAction.JOB_APPLIED, user_id=context.user_id, details={"job_id": job_id})
        return success_response(
            ApplicationDTO.from_domain(application).model_dump(by_alias=True, mode="json"),
            HTTPStatus.CREATED,
        )

    def my_applications(self, context: RequestContext) -> tuple[Response, int]:
        applications = self._list_applications.execute(context.user_id)
        return success_response(
            {
                "applications": [
                    ApplicationDTO.from_domain(a).model_dump(by_alias=True, mode="json")
                    for a in applications
                ]
            }
        )

    def as_blueprint(self) -> Blueprint:
        employer_only = (self._authenticate, require_role(Role.EMPLOYER, audit=self._audit))
        candidate_only = (self._authenticate, require_role(Role.CANDIDATE, audit=self._audit))

        bp = Blueprint("jobs", __name__, url_prefix="/api/v1/jobs")
        bp.add_url_rule("", view_func=self.list_jobs, methods=["GET"])
        bp.add_url_rule(
            "",
            endpoint="create_job",
            view_func=guarded(self.create_job, *employer_only),
            methods=["POST"],
        )
        bp.add_url_rule(
            "/my-jobs",
            endpoint="my_jobs",
            view_func=guarded(self.my_jobs, *employer_only),
            methods=["GET"],
        )
        bp.add_url_rule(
            "/<int:job_id>/apply",
            endpoint="apply",
            view_func=guarded(self.apply, *candidate_only),
            methods=["POST"],
        )
        bp.add_url_rule(
            "/applications",
            endpoint="my_applications",
            view_func=guarded(self.my_applications, *candidate_only),
            methods=["GET"],
        )
        return bp
