"""Persistence layer for the Job Board."""

from job_board.db.database import Base, Database
from job_board.db.tables import Application, Job, StatusLog, User

__all__ = ["Base", "Database", "User", "Job", "Application", "StatusLog"]
