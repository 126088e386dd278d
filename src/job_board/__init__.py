"""
Job Board: employers post jobs and review applicants, job seekers apply and
track their applications.

The services in ``job_board.services`` hold the business rules; the FastAPI
app in ``job_board.api`` is a thin HTTP layer over them.
"""

__version__ = "0.1.0"
