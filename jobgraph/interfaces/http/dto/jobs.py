# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from jobgraph.domain.jobs.entities import ApplicationStatus, JobApplication, JobPosting, JobStatus


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class CreateJobRequestDTO(_CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=20000)
    city: str | None = Field(None, max_length=100)
    remote_option: str | None = Field(None, alias="remoteOption", max_length=32)
    employment_type: str | None = Field(None, alias="employmentType", max_length=32)
    salary_min: int | None = Field(None, alias="salaryMin", ge=0)
    salary_max: int | None = Field(None, alias="salaryMax", ge=0)
    status: JobStatus = JobStatus.ACTIVE

    @model_validator(mode="after")
    def check_salary_range(self) -> CreateJobRequestDTO:
        if self.salary_min is not None and self.salary_max is not None and self.salary_min > self.salary_max:
            raise ValueError("salaryMin must not exceed salaryMax")
        return self


class ApplyRequestDTO(_CamelModel):
    cover_letter: str | None = Field(None, alias="coverLetter", max_length=10000)


class ListJobsQueryDTO(_CamelModel):
    limit: int = Field(20, ge=1, le=100)
    offset: int = Field(0, ge=0)


class JobDTO(_CamelModel):
    id: int
    posted_by: int = Field(alias="postedBy")
    title: str
    description: str
    status: JobStatus
    city: str | None = None
    remote_option: str | None = Field(None, alias="remoteOption")
    employment_type: str | None = Field(None, alias="employmentType")
    salary_min: int | None = Field(None, alias="salaryMin")
    salary_max: int | None = Field(None, alias="salaryMax")
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_domain(cls, job: JobPosting) -> JobDTO:
        return cls(
            id=job.id,
            posted_by=job.posted_by,
            title=job.title,
            description=job.description,
            status=job.status,
            city=job.city,
            remote_option=job.remote_option,
            employment_type=job.employment_type,
            salary_min=job.salary_min,
            salary_max=job.salary_max,
            created_at=job.created_at,
        )


class ApplicationDTO(_CamelModel):
    id: int
    job_id: int = Field(alias="jobId")
    candidate_id: int = Field(alias="candidateId")
    status: ApplicationStatus
    cover_letter: str | None = Field(None, alias="coverLetter")
    applied_at: datetime = Field(alias="appliedAt")

    @classmethod
    def from_domain(cls, application: JobApplication) -> ApplicationDTO:
        return cls(
            id=application.id,
            job_id=application.job_id,
            candidate_id=application.candidate_id,
            status=application.status,
            cover_letter=application.cover_letter,
            applied_at=application.applied_at,
        )
