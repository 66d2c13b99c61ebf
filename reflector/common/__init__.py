"""Common utilities for the request reflector."""

from .validators import is_valid_url, parse_ip_target
from .headers import extract_forwarded_headers, build_base_url
from .url_builder import build_short_url
from .logging_config import setup_logging

__all__ = [
    "is_valid_url",
    "parse_ip_target",
    "extract_forwarded_headers",
    "build_base_url",
    "build_short_url",
    "setup_logging",
]
