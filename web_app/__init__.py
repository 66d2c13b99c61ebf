"""FastAPI web application for the request reflector."""

from .app_factory import create_app

__all__ = ["create_app"]
