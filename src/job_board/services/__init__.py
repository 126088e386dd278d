"""Business services over the job board store."""

from job_board.services.applications import ApplicationService
from job_board.services.jobs import JobService
from job_board.services.profiles import ProfileService

__all__ = ["ApplicationService", "JobService", "ProfileService"]
