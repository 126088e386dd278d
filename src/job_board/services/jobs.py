"""Job postings: public listing plus owner-only mutation."""

from typing import Any, Mapping, Optional, Union

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from job_board.core.errors import Forbidden, NotFound, Unauthorized, ValidationFailed
from job_board.core.models import (
    ALL_STATUSES,
    JobPayload,
    JobRead,
    JobStatus,
    Page,
    Principal,
    parse_payload,
)
from job_board.db.tables import Application, Job
from job_board.services.views import job_to_read
from job_board.utils.logging import get_logger, log_function_call

logger = get_logger(__name__)


class JobService:
    """CRUD over job postings. Only the creating ADMIN may change a job."""

    def __init__(self, session: Session):
        self.session = session
        self.logger = logger.bind(component="job_service")

    def _require_admin(self, principal: Optional[Principal], action: str) -> Principal:
        if principal is None:
            raise Unauthorized()
        if not principal.is_admin:
            self.logger.warning(
                "Job action denied: admin role required",
                action=action,
                user_id=principal.user_id,
            )
            raise Forbidden("Only employers can manage job postings")
        return principal

    def _load_owned(self, principal: Principal, job_id: str, action: str) -> Job:
        job = self.session.get(Job, job_id)
        if job is None:
            raise NotFound("Job not found")
        if job.created_by != principal.user_id:
            self.logger.warning("Job action denied: not owner", action=action, job_id=job_id, user_id=principal.user_id)
            raise Forbidden("Forbidden: You do not own this job post.")
        return job

    def _applicant_count(self, job_id: str) -> int:
        return self.session.scalar(
            select(func.count(Application.id)).where(Application.job_id == job_id)
        ) or 0

    def create(self, principal: Optional[Principal], payload: Union[JobPayload, Mapping[str, Any]]) -> JobRead:
        """Create a job owned by the calling ADMIN."""
        principal = self._require_admin(principal, "create")
        data: JobPayload = parse_payload(JobPayload, payload)

        job = Job(
            title=data.title,
            department=data.department,
            location=data.location,
            salary=data.salary,
            description=data.description,
            requirements=data.requirements,
            resume_required=data.resume_required,
            custom_fields=[f.model_dump(mode="json") for f in data.custom_fields],
            status=data.status,
            created_by=principal.user_id,
        )
        self.session.add(job)
        self.session.commit()

        self.logger.info("Job created", job_id=job.id, created_by=principal.user_id, status=job.status.value)
        return job_to_read(job)

    def get(self, job_id: str, principal: Optional[Principal] = None) -> JobRead:
        """Fetch one job; its applications are included only for the owner."""
        job = self.session.get(Job, job_id)
        if job is None:
            raise NotFound("Job not found")

        is_owner = principal is not None and principal.user_id == job.created_by
        return job_to_read(job, self._applicant_count(job.id), include_applications=is_owner)

    def update(
        self,
        principal: Optional[Principal],
        job_id: str,
        payload: Union[JobPayload, Mapping[str, Any]],
    ) -> JobRead:
        """Overwrite every mutable field of an owned job."""
        principal = self._require_admin(principal, "update")
        job = self._load_owned(principal, job_id, "update")
        data: JobPayload = parse_payload(JobPayload, payload)

        job.title = data.title
        job.department = data.department
        job.location = data.location
        job.salary = data.salary
        job.description = data.description
        job.requirements = data.requirements
        job.resume_required = data.resume_required
        job.custom_fields = [f.model_dump(mode="json") for f in data.custom_fields]
        job.status = data.status
        self.session.commit()

        self.logger.info("Job updated", job_id=job.id, user_id=principal.user_id, status=job.status.value)
        return job_to_read(job, self._applicant_count(job.id))

    def delete(self, principal: Optional[Principal], job_id: str) -> bool:
        """Delete an owned job together with its applications and their logs."""
        principal = self._require_admin(principal, "delete")
        job = self._load_owned(principal, job_id, "delete")

        application_count = len(job.applications)
        self.session.delete(job)
        self.session.commit()

        self.logger.info(
            "Job deleted",
            job_id=job_id,
            user_id=principal.user_id,
            cascaded_applications=application_count,
        )
        return True

    def _apply_status(self, job: Job, new_status: JobStatus) -> JobRead:
        previous = job.status
        job.status = new_status
        self.session.commit()

        self.logger.info("Job status changed", job_id=job.id, from_status=previous.value, to_status=new_status.value)
        return job_to_read(job, self._applicant_count(job.id))

    def set_status(self, principal: Optional[Principal], job_id: str, status: Union[JobStatus, str]) -> JobRead:
        principal = self._require_admin(principal, "set_status")
        job = self._load_owned(principal, job_id, "set_status")
        try:
            new_status = JobStatus(status)
        except ValueError:
            raise ValidationFailed.single("status", f"Unknown job status: {status}")
        return self._apply_status(job, new_status)

    def toggle_status(self, principal: Optional[Principal], job_id: str) -> JobRead:
        """Close an active job, otherwise (re)open it. A DRAFT is published."""
        principal = self._require_admin(principal, "toggle_status")
        job = self._load_owned(principal, job_id, "toggle_status")
        new_status = JobStatus.CLOSED if job.status == JobStatus.ACTIVE else JobStatus.ACTIVE
        return self._apply_status(job, new_status)

    def list(
        self,
        search: Optional[str] = None,
        department: Optional[str] = None,
        location: Optional[str] = None,
        status: Optional[str] = JobStatus.ACTIVE.value,
        page: int = 1,
        limit: int = 10,
        created_by: Optional[str] = None,
    ) -> Page[JobRead]:
        """
        Filter and paginate jobs, newest first.

        ``status`` defaults to ACTIVE; ``"ALL"`` disables the status filter.
        """
        self.logger.debug("Listing jobs", **log_function_call(
            "list", search=search, department=department, location=location,
            status=status, page=page, limit=limit, created_by=created_by,
        ))
        if page < 1:
            raise ValidationFailed.single("page", "Page must be at least 1")
        if limit < 1:
            raise ValidationFailed.single("limit", "Limit must be at least 1")

        conditions = []
        if status and status != ALL_STATUSES:
            try:
                conditions.append(Job.status == JobStatus(status))
            except ValueError:
                raise ValidationFailed.single("status", f"Unknown job status: {status}")
        if search:
            conditions.append(or_(
                Job.title.icontains(search, autoescape=True),
                Job.description.icontains(search, autoescape=True),
            ))
        if department:
            conditions.append(Job.department.icontains(department, autoescape=True))
        if location:
            conditions.append(Job.location.icontains(location, autoescape=True))
        if created_by:
            conditions.append(Job.created_by == created_by)

        total = self.session.scalar(select(func.count(Job.id)).where(*conditions)) or 0

        counts = (
            select(Application.job_id, func.count(Application.id).label("applicant_count"))
            .group_by(Application.job_id)
            .subquery()
        )
        rows = self.session.execute(
            select(Job, func.coalesce(counts.c.applicant_count, 0))
            .outerjoin(counts, counts.c.job_id == Job.id)
            .where(*conditions)
            .options(selectinload(Job.poster))
            .order_by(Job.created_at.desc(), Job.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()

        return Page[JobRead](
            items=[job_to_read(job, count) for job, count in rows],
            total=total,
            page=page,
            limit=limit,
        )

    def list_owned(self, principal: Optional[Principal], page: int = 1, limit: int = 10) -> Page[JobRead]:
        """The calling ADMIN's own jobs in every status."""
        principal = self._require_admin(principal, "list_owned")
        return self.list(status=ALL_STATUSES, page=page, limit=limit, created_by=principal.user_id)
