"""URL building utilities for short links."""

from ..shortlink import short_path


def build_short_url(short_code: str, base_url: str) -> str:
    """Build complete short URL.
    
    Args:
        short_code: The short code
        base_url: Base URL (e.g., https://example.com)
        
    Returns:
        Complete short URL (e.g., https://example.com/ln/04ac)
    """
    base = base_url.rstrip("/")
    return f"{base}{short_path(short_code)}"
