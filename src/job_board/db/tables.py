"""Relational schema: users, jobs, applications and status logs."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from job_board.core.models import ApplicationStatus, JobStatus, Role
from job_board.db.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    # Naive UTC; SQLite drops tzinfo on read
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    role = Column(Enum(Role, native_enum=False, length=16), nullable=False, default=Role.USER)
    phone = Column(String(20))
    location = Column(String(100))
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    jobs = relationship("Job", back_populates="poster")
    applications = relationship("Application", back_populates="user")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


class Job(Base):
    __tablename__ = "jobs"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(255), nullable=False)
    department = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    salary = Column(String(255))
    description = Column(Text, nullable=False)
    requirements = Column(Text, nullable=False)
    resume_required = Column(Boolean, nullable=False, default=False)
    # Ordered list of question documents
    custom_fields = Column(JSON, nullable=False, default=list)
    status = Column(Enum(JobStatus, native_enum=False, length=16), nullable=False, default=JobStatus.ACTIVE, index=True)
    created_by = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    poster = relationship("User", back_populates="jobs")
    applications = relationship(
        "Application",
        back_populates="job",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Job(id={self.id}, title={self.title}, status={self.status})>"


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (UniqueConstraint("job_id", "user_id", name="uq_application_job_user"),)

    id = Column(String(36), primary_key=True, default=_new_id)
    job_id = Column(String(36), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Answers keyed by custom field id
    answers = Column(JSON, nullable=False, default=dict)
    resume_url = Column(String(1024))
    status = Column(
        Enum(ApplicationStatus, native_enum=False, length=16),
        nullable=False,
        default=ApplicationStatus.PENDING,
        index=True,
    )
    created_at = Column(DateTime, default=_utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    job = relationship("Job", back_populates="applications")
    user = relationship("User", back_populates="applications")
    status_logs = relationship(
        "StatusLog",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by=lambda: [StatusLog.created_at.desc(), StatusLog.id.desc()],
    )

    def __repr__(self):
        return f"<Application(job_id={self.job_id}, user_id={self.user_id}, status={self.status})>"


class StatusLog(Base):
    """Append-only; rows are never updated or deleted on their own."""

    __tablename__ = "status_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(String(36), ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(Enum(ApplicationStatus, native_enum=False, length=16), nullable=False)
    notes = Column(Text)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    application = relationship("Application", back_populates="status_logs")

    def __repr__(self):
        return f"<StatusLog(application_id={self.application_id}, status={self.status})>"
