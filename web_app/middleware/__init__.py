"""Middleware for the request reflector web app."""

from .headers import RequestFactsMiddleware
from .logging import LoggingMiddleware

__all__ = ["RequestFactsMiddleware", "LoggingMiddleware"]
