"""Core logic for the request reflector."""

from .shortlink import allocate, resolve, RedirectTarget, NotFound, Invalid
from .service import ShortLinkService

__all__ = [
    "allocate",
    "resolve",
    "RedirectTarget",
    "NotFound",
    "Invalid",
    "ShortLinkService",
]
