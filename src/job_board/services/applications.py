"""Applications and their status transitions."""

from typing import Any, List, Mapping, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from job_board.core.errors import DuplicateApplication, Forbidden, NotFound, Unauthorized, ValidationFailed
from job_board.core.models import (
    ApplicationPayload,
    ApplicationRead,
    ApplicationStatus,
    Page,
    Principal,
    StatusLogRead,
    StatusUpdatePayload,
    load_custom_fields,
    parse_payload,
    validate_answers,
)
from job_board.db.tables import Application, Job, StatusLog
from job_board.services.views import application_to_read
from job_board.utils.logging import get_logger, log_function_call

logger = get_logger(__name__)


class ApplicationService:
    """
    Submission, listing and review of job applications.

    Every write that changes an application's status also appends a
    StatusLog row in the same commit, so an application always has
    ``1 + number of transitions`` log rows and its newest log matches its
    current status.
    """

    def __init__(self, session: Session):
        self.session = session
        self.logger = logger.bind(component="application_service")

    def _load(self, application_id: str) -> Application:
        application = self.session.get(Application, application_id)
        if application is None:
            raise NotFound("Application not found")
        return application

    def _can_view(self, principal: Principal, application: Application) -> bool:
        if principal.is_admin:
            return application.job.created_by == principal.user_id
        return application.user_id == principal.user_id

    def submit(
        self,
        principal: Optional[Principal],
        payload: Union[ApplicationPayload, Mapping[str, Any]],
    ) -> ApplicationRead:
        """
        Apply to a job as the calling USER.

        The (job, user) unique constraint decides duplicates: the insert of
        the application and its first PENDING log either commit together or
        not at all.

        Raises:
            Unauthorized: no caller
            Forbidden: caller is not a USER
            ValidationFailed: malformed payload, missing resume or bad answers
            NotFound: the job does not exist
            DuplicateApplication: the caller already applied to this job
        """
        if principal is None:
            raise Unauthorized()
        if not principal.is_user:
            self.logger.warning("Application denied: user role required", user_id=principal.user_id)
            raise Forbidden("Only job seekers can apply to jobs")

        data: ApplicationPayload = parse_payload(ApplicationPayload, payload)

        job = self.session.get(Job, data.job_id)
        if job is None:
            raise NotFound("Job not found")

        if job.resume_required and data.resume_url is None:
            raise ValidationFailed.single("resumeUrl", "A resume is required for this job")

        custom_fields = load_custom_fields(job.custom_fields)
        answers = validate_answers(custom_fields, data.answers)
        dropped = sorted(set(data.answers) - set(answers) - {f.id for f in custom_fields})
        if dropped:
            self.logger.warning("Discarded answers to unknown questions", job_id=job.id, field_ids=dropped)

        application = Application(
            job_id=job.id,
            user_id=principal.user_id,
            answers=answers,
            resume_url=str(data.resume_url) if data.resume_url else None,
            status=ApplicationStatus.PENDING,
        )
        application.status_logs.append(StatusLog(status=ApplicationStatus.PENDING, notes=None))
        self.session.add(application)

        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            self.logger.info("Duplicate application rejected", job_id=job.id, user_id=principal.user_id)
            raise DuplicateApplication() from e

        self.logger.info(
            "Application submitted",
            application_id=application.id,
            job_id=job.id,
            user_id=principal.user_id,
            has_resume=application.resume_url is not None,
        )
        return application_to_read(application)

    def list(
        self,
        principal: Optional[Principal],
        job_id: Optional[str] = None,
        status: Optional[Union[ApplicationStatus, str]] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page[ApplicationRead]:
        """
        Paginate applications, newest first.

        A USER only ever sees their own applications whatever the filters.
        An ADMIN sees applications across all users; pass ``job_id`` to
        narrow to one posting.
        """
        if principal is None:
            raise Unauthorized()
        self.logger.debug("Listing applications", **log_function_call(
            "list", user_id=principal.user_id, role=principal.role.value,
            job_id=job_id, status=status, page=page, limit=limit,
        ))
        if page < 1:
            raise ValidationFailed.single("page", "Page must be at least 1")
        if limit < 1:
            raise ValidationFailed.single("limit", "Limit must be at least 1")

        conditions = []
        if principal.is_user:
            conditions.append(Application.user_id == principal.user_id)
        if job_id:
            conditions.append(Application.job_id == job_id)
        if status:
            try:
                conditions.append(Application.status == ApplicationStatus(status))
            except ValueError:
                raise ValidationFailed.single("status", f"Unknown application status: {status}")

        total = self.session.scalar(select(func.count(Application.id)).where(*conditions)) or 0
        applications = self.session.scalars(
            select(Application)
            .where(*conditions)
            .options(
                selectinload(Application.job),
                selectinload(Application.user),
                selectinload(Application.status_logs),
            )
            .order_by(Application.created_at.desc(), Application.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()

        return Page[ApplicationRead](
            items=[application_to_read(app) for app in applications],
            total=total,
            page=page,
            limit=limit,
        )

    def get(self, principal: Optional[Principal], application_id: str) -> ApplicationRead:
        """Single application for its applicant or the owning employer."""
        if principal is None:
            raise Unauthorized()
        application = self._load(application_id)
        if not self._can_view(principal, application):
            raise Forbidden("You cannot view this application")
        return application_to_read(application)

    def transition(
        self,
        principal: Optional[Principal],
        application_id: str,
        payload: Union[StatusUpdatePayload, Mapping[str, Any]],
    ) -> ApplicationRead:
        """
        Move an application to a new status and log the transition.

        Any status may follow any other, including itself; a repeated status
        still appends a log row. Only the ADMIN who owns the job may do this.
        """
        if principal is None:
            raise Unauthorized()
        if not principal.is_admin:
            self.logger.warning("Status change denied: admin role required", application_id=application_id)
            raise Forbidden("Only employers can change application status")

        data: StatusUpdatePayload = parse_payload(StatusUpdatePayload, payload)
        application = self._load(application_id)

        if application.job.created_by != principal.user_id:
            self.logger.warning(
                "Status change denied: not job owner",
                application_id=application_id,
                job_id=application.job_id,
                user_id=principal.user_id,
            )
            raise Forbidden("Forbidden: You do not own this job post.")

        previous = application.status
        application.status = data.status
        application.status_logs.append(StatusLog(status=data.status, notes=data.notes))
        self.session.commit()

        self.logger.info(
            "Application status changed",
            application_id=application_id,
            from_status=previous.value,
            to_status=data.status.value,
            changed_by=principal.user_id,
        )
        return application_to_read(application)

    def status_logs(self, principal: Optional[Principal], application_id: str) -> List[StatusLogRead]:
        """Status history newest first."""
        if principal is None:
            raise Unauthorized()
        application = self._load(application_id)
        if not self._can_view(principal, application):
            raise Forbidden("You cannot view this application's history")

        logs = self.session.scalars(
            select(StatusLog)
            .where(StatusLog.application_id == application_id)
            .order_by(StatusLog.created_at.desc(), StatusLog.id.desc())
        ).all()
        return [StatusLogRead.model_validate(log) for log in logs]
