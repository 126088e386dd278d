"""API routes for the Job Board."""

from datetime import datetime, timezone
from typing import Annotated, Iterator, List, Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import text
from sqlalchemy.orm import Session

from job_board import __version__
from job_board.api.models import DeleteResponse, HealthCheck, UploadResponse
from job_board.config import settings
from job_board.core.errors import Unauthorized
from job_board.core.models import (
    ALL_STATUSES,
    ApplicationPayload,
    ApplicationRead,
    ApplicationStatus,
    JobPayload,
    JobRead,
    JobStatus,
    JobStatusPayload,
    Page,
    Principal,
    ProfileUpdatePayload,
    StatusLogRead,
    StatusUpdatePayload,
    UserRead,
)
from job_board.services import ApplicationService, JobService, ProfileService
from job_board.storage.blob import BlobStorageClient, check_resume
from job_board.utils.logging import get_logger

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)

# Create routers
jobs_router = APIRouter(prefix="/jobs", tags=["jobs"])
applications_router = APIRouter(prefix="/applications", tags=["applications"])
profile_router = APIRouter(prefix="/profile", tags=["profile"])
upload_router = APIRouter(prefix="/upload", tags=["upload"])
health_router = APIRouter(prefix="/health", tags=["health"])

PageNumber = Annotated[int, Query(ge=1, description="1-indexed page")]
PageSize = Annotated[int, Query(ge=1, le=settings.max_page_size, description="Page size")]


# Dependencies

def get_session(request: Request) -> Iterator[Session]:
    """One session per request."""
    with request.app.state.database.session() as session:
        yield session


def get_current_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session: Session = Depends(get_session),
) -> Optional[Principal]:
    """Resolve the bearer token, if any, to a principal."""
    if not credentials:
        return None
    return request.app.state.identity.resolve(session, credentials.credentials)


def require_principal(principal: Optional[Principal] = Depends(get_current_principal)) -> Principal:
    if principal is None:
        raise Unauthorized()
    return principal


def get_job_service(session: Session = Depends(get_session)) -> JobService:
    return JobService(session)


def get_application_service(session: Session = Depends(get_session)) -> ApplicationService:
    return ApplicationService(session)


def get_profile_service(session: Session = Depends(get_session)) -> ProfileService:
    return ProfileService(session)


def get_storage(request: Request) -> BlobStorageClient:
    return request.app.state.storage


# Jobs

@jobs_router.get("", response_model=Page[JobRead])
def list_jobs(
    search: Optional[str] = Query(None, description="Case-insensitive match on title or description"),
    department: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    status: str = Query(JobStatus.ACTIVE.value, description=f"Job status or {ALL_STATUSES}"),
    page: PageNumber = 1,
    limit: PageSize = settings.default_page_size,
    jobs: JobService = Depends(get_job_service),
):
    """List jobs, newest first, with applicant counts."""
    return jobs.list(
        search=search,
        department=department,
        location=location,
        status=status,
        page=page,
        limit=limit,
    )


@jobs_router.get("/mine", response_model=Page[JobRead])
def list_my_jobs(
    page: PageNumber = 1,
    limit: PageSize = settings.default_page_size,
    principal: Principal = Depends(require_principal),
    jobs: JobService = Depends(get_job_service),
):
    """The calling employer's jobs in every status."""
    return jobs.list_owned(principal, page=page, limit=limit)


@jobs_router.get("/{job_id}", response_model=JobRead)
def get_job(
    job_id: str,
    principal: Optional[Principal] = Depends(get_current_principal),
    jobs: JobService = Depends(get_job_service),
):
    return jobs.get(job_id, principal)


@jobs_router.post("", response_model=JobRead, status_code=201)
def create_job(
    payload: JobPayload,
    principal: Principal = Depends(require_principal),
    jobs: JobService = Depends(get_job_service),
):
    return jobs.create(principal, payload)


@jobs_router.put("/{job_id}", response_model=JobRead)
def update_job(
    job_id: str,
    payload: JobPayload,
    principal: Principal = Depends(require_principal),
    jobs: JobService = Depends(get_job_service),
):
    return jobs.update(principal, job_id, payload)


@jobs_router.patch("/{job_id}/status", response_model=JobRead)
def set_job_status(
    job_id: str,
    payload: JobStatusPayload,
    principal: Principal = Depends(require_principal),
    jobs: JobService = Depends(get_job_service),
):
    return jobs.set_status(principal, job_id, payload.status)


@jobs_router.post("/{job_id}/toggle", response_model=JobRead)
def toggle_job_status(
    job_id: str,
    principal: Principal = Depends(require_principal),
    jobs: JobService = Depends(get_job_service),
):
    """Switch between ACTIVE and CLOSED."""
    return jobs.toggle_status(principal, job_id)


@jobs_router.delete("/{job_id}", response_model=DeleteResponse)
def delete_job(
    job_id: str,
    principal: Principal = Depends(require_principal),
    jobs: JobService = Depends(get_job_service),
):
    return DeleteResponse(success=jobs.delete(principal, job_id))


# Applications

@applications_router.post("", response_model=ApplicationRead, status_code=201)
def submit_application(
    payload: ApplicationPayload,
    principal: Principal = Depends(require_principal),
    applications: ApplicationService = Depends(get_application_service),
):
    return applications.submit(principal, payload)


@applications_router.get("", response_model=Page[ApplicationRead])
def list_applications(
    job_id: Optional[str] = Query(None, alias="jobId"),
    status: Optional[ApplicationStatus] = Query(None),
    page: PageNumber = 1,
    limit: PageSize = settings.default_page_size,
    principal: Principal = Depends(require_principal),
    applications: ApplicationService = Depends(get_application_service),
):
    """Job seekers see their own applications; employers see all."""
    return applications.list(principal, job_id=job_id, status=status, page=page, limit=limit)


@applications_router.get("/{application_id}", response_model=ApplicationRead)
def get_application(
    application_id: str,
    principal: Principal = Depends(require_principal),
    applications: ApplicationService = Depends(get_application_service),
):
    return applications.get(principal, application_id)


@applications_router.put("/{application_id}/status", response_model=ApplicationRead)
def update_application_status(
    application_id: str,
    payload: StatusUpdatePayload,
    principal: Principal = Depends(require_principal),
    applications: ApplicationService = Depends(get_application_service),
):
    return applications.transition(principal, application_id, payload)


@applications_router.get("/{application_id}/logs", response_model=List[StatusLogRead])
def get_application_logs(
    application_id: str,
    principal: Principal = Depends(require_principal),
    applications: ApplicationService = Depends(get_application_service),
):
    return applications.status_logs(principal, application_id)


# Profile

@profile_router.get("", response_model=UserRead)
def get_profile(
    principal: Principal = Depends(require_principal),
    profiles: ProfileService = Depends(get_profile_service),
):
    return profiles.get(principal)


@profile_router.put("", response_model=UserRead)
def update_profile(
    payload: ProfileUpdatePayload,
    principal: Principal = Depends(require_principal),
    profiles: ProfileService = Depends(get_profile_service),
):
    return profiles.update(principal, payload)


# Upload

@upload_router.post("", response_model=UploadResponse)
async def upload_resume(
    request: Request,
    file: UploadFile = File(...),
    principal: Principal = Depends(require_principal),
    storage: BlobStorageClient = Depends(get_storage),
):
    """Store a PDF resume and return its URL."""
    max_bytes = request.app.state.settings.resume_max_bytes
    # Reject on the declared size before buffering the body
    if file.size is not None:
        check_resume(file.content_type, file.size, max_bytes)
    content = await file.read(max_bytes + 1)
    check_resume(file.content_type, len(content), max_bytes)

    stored = await storage.upload(content, file.filename or "resume.pdf")
    logger.info("Resume uploaded", user_id=principal.user_id, public_id=stored.public_id)
    return UploadResponse(url=stored.url, public_id=stored.public_id)


# Health

@health_router.get("", response_model=HealthCheck)
def health_check(request: Request):
    """Health check endpoint."""
    components = {
        "database": "healthy",
        "storage": "healthy" if request.app.state.storage.configured else "unconfigured",
    }
    try:
        with request.app.state.database.session() as session:
            session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        components["database"] = "unavailable"

    overall_status = "healthy" if components["database"] == "healthy" else "degraded"

    return HealthCheck(
        status=overall_status,
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        components=components,
    )


# Export all routers
all_routers = [
    jobs_router,
    applications_router,
    profile_router,
    upload_router,
    health_router,
]
