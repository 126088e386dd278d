"""Conversions from ORM rows to read models."""

from typing import Optional

from job_board.core.models import (
    ApplicationRead,
    JobRead,
    JobSummary,
    StatusLogRead,
    UserSummary,
)
from job_board.db.tables import Application, Job, User


def user_summary(user: Optional[User]) -> Optional[UserSummary]:
    return UserSummary(name=user.name, email=user.email) if user is not None else None


def application_to_read(
    application: Application,
    include_job: bool = True,
    include_logs: bool = True,
) -> ApplicationRead:
    return ApplicationRead(
        id=application.id,
        job_id=application.job_id,
        user_id=application.user_id,
        answers=application.answers or {},
        resume_url=application.resume_url,
        status=application.status,
        created_at=application.created_at,
        updated_at=application.updated_at,
        job=JobSummary.model_validate(application.job) if include_job and application.job else None,
        applicant=user_summary(application.user),
        status_logs=[
            StatusLogRead.model_validate(log)
            for log in sorted(application.status_logs, key=lambda l: (l.created_at, l.id or 0), reverse=True)
        ] if include_logs else [],
    )


def job_to_read(job: Job, applicant_count: int = 0, include_applications: bool = False) -> JobRead:
    applications = None
    if include_applications:
        applications = [
            application_to_read(app, include_job=False, include_logs=False)
            for app in sorted(job.applications, key=lambda a: a.created_at, reverse=True)
        ]

    return JobRead(
        id=job.id,
        title=job.title,
        department=job.department,
        location=job.location,
        salary=job.salary,
        description=job.description,
        requirements=job.requirements,
        resume_required=job.resume_required,
        custom_fields=job.custom_fields or [],
        status=job.status,
        created_by=job.created_by,
        created_at=job.created_at,
        updated_at=job.updated_at,
        poster=user_summary(job.poster),
        applicant_count=applicant_count,
        applications=applications,
    )
