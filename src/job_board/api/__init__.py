"""HTTP API package for the Job Board."""

from .main import app, create_app

__all__ = ["app", "create_app"]
