from __future__ import annotations

from datetime import UTC, datetime

import pytest
from flask.testing import FlaskClient

from jobgraph.application.use_cases.jobs.apply_to_job import ApplyToJobUseCase
from jobgraph.domain.jobs.entities import JobApplication, JobPosting, JobStatus
from jobgraph.domain.jobs.exceptions import (
    DuplicateApplicationError,
    JobClosedError,
    JobNotFoundError,
)


class InMemoryJobRepository:
    def __init__(self, *jobs: JobPosting) -> None:
        self._jobs = {job.id: job for job in jobs}

    def find_by_id(self, job_id: int) -> JobPosting | None:
        return self._jobs.get(job_id)


class InMemoryApplicationRepository:
    def __init__(self) -> None:
        self.items: list[JobApplication] = []

    def add(self, application: JobApplication) -> JobApplication:
        if any(
            a.job_id == application.job_id and a.candidate_id == application.candidate_id
            for a in self.items
        ):
            raise DuplicateApplicationError()
        self.items.append(application)
        return application


def _job(job_id: int, status: JobStatus = JobStatus.ACTIVE) -> JobPosting:
    return JobPosting(
        id=job_id,
        posted_by=1,
        title="Engineer",
        description="Build things",
        created_at=datetime(2025, 1, 1, tzinfo=UTC),
        status=status,
    )


def test_apply_rules() -> None:
    applications = InMemoryApplicationRepository()
    use_case = ApplyToJobUseCase(
        jobs=InMemoryJobRepository(_job(1), _job(2, JobStatus.CLOSED)),  # type: ignore[arg-type]
        applications=applications,  # type: ignore[arg-type]
    )

    use_case.execute(candidate_id=5, job_id=1, cover_letter="Hi")
    with pytest.raises(DuplicateApplicationError):
        use_case.execute(candidate_id=5, job_id=1)
    with pytest.raises(JobClosedError):
        use_case.execute(candidate_id=5, job_id=2)
    with pytest.raises(JobNotFoundError):
        use_case.execute(candidate_id=5, job_id=3)
    assert [a.job_id for a in applications.items] == [1]


def _login(client: FlaskClient, email: str, role: str) -> dict[str, str]:
    client.post(
        "/api/v1/auth/register",
        json={
            "email": email,
            "password": "Secret1!",
            "firstName": "Test",
            "lastName": "User",
            "role": role,
        },
    )
    response = client.post("/api/v1/auth/login", json={"email": email, "password": "Secret1!"})
    return {"Authorization": f"Bearer {response.get_json()['data']['accessToken']}"}


def test_job_routes_are_role_gated(client: FlaskClient) -> None:
    employer = _login(client, "boss@example.com", "employer")
    candidate = _login(client, "cand@example.com", "candidate")
    posting = {"title": "Data engineer", "description": "Pipelines", "salaryMin": 10, "salaryMax": 20}

    assert client.post("/api/v1/jobs", json=posting).status_code == 401
    denied = client.post("/api/v1/jobs", json=posting, headers=candidate)
    assert denied.status_code == 403
    assert denied.get_json()["error"]["details"] == {"required_roles": ["employer"]}

    created = client.post("/api/v1/jobs", json=posting, headers=employer)
    assert created.status_code == 201
    job_id = created.get_json()["data"]["id"]

    assert client.post(f"/api/v1/jobs/{job_id}/apply", json={}, headers=employer).status_code == 403
    applied = client.post(
        f"/api/v1/jobs/{job_id}/apply", json={"coverLetter": "Pick me"}, headers=candidate
    )
    assert applied.status_code == 201
    again = client.post(f"/api/v1/jobs/{job_id}/apply", json={}, headers=candidate)
    assert again.status_code == 409
    assert again.get_json()["error"]["code"] == "ALREADY_APPLIED"
    missing = client.post("/api/v1/jobs/9999/apply", json={}, headers=candidate)
    assert missing.status_code == 404

    mine = client.get("/api/v1/jobs/applications", headers=candidate).get_json()["data"]
    assert [a["jobId"] for a in mine["applications"]] == [job_id]
    assert client.get("/api/v1/jobs/applications", headers=employer).status_code == 403

    listing = client.get("/api/v1/jobs?limit=5").get_json()["data"]["jobs"]
    assert [job["title"] for job in listing] == ["Data engineer"]


def test_create_job_validation(client: FlaskClient) -> None:
    employer = _login(client, "boss@example.com", "employer")

    response = client.post(
        "/api/v1/jobs",
        json={"title": "X", "description": "Y", "salaryMin": 50, "salaryMax": 10},
        headers=employer,
    )

    assert response.status_code == 400
    assert response.get_json()["error"]["code"] == "VALIDATION_ERROR"
