"""Header parsing utilities for the request reflector."""

from typing import Dict, Iterable, Optional


def extract_forwarded_headers(headers: Dict[str, str]) -> Dict[str, Optional[str]]:
    """Extract X-Forwarded-* headers from request.
    
    Args:
        headers: Request headers dictionary
        
    Returns:
        Dictionary with forwarded_proto, forwarded_host, forwarded_for
    """
    # Case-insensitive lookup
    headers_lower = {k.lower(): v for k, v in headers.items()}
    
    return {
        "forwarded_proto": headers_lower.get("x-forwarded-proto"),
        "forwarded_host": headers_lower.get("x-forwarded-host"),
        "forwarded_for": headers_lower.get("x-forwarded-for"),
    }


def first_header_value(headers: Dict[str, str], names: Iterable[str]) -> Optional[str]:
    """Return the first non-empty value among ``names``.
    
    Comma-separated lists (X-Forwarded-For) yield their first entry, which is
    the address closest to the client.
    
    Args:
        headers: Request headers
        names: Header names in priority order
        
    Returns:
        Header value or None
    """
    headers_lower = {k.lower(): v for k, v in headers.items()}
    
    for name in names:
        value = headers_lower.get(name.lower())
        if not value:
            continue
        value = value.split(",")[0].strip()
        if value:
            return value
    
    return None


def build_base_url(
    headers: Dict[str, str],
    fallback_base_url: str,
    request_scheme: Optional[str] = None,
    request_host: Optional[str] = None,
) -> str:
    """Build base URL from headers or fallback.
    
    Priority:
    1. X-Forwarded-Proto + X-Forwarded-Host
    2. Request scheme + host
    3. Fallback base URL from config
    
    Args:
        headers: Request headers
        fallback_base_url: Fallback base URL from configuration
        request_scheme: Request scheme (http/https)
        request_host: Request host
        
    Returns:
        Base URL (e.g., https://example.com)
    """
    forwarded = extract_forwarded_headers(headers)
    
    if forwarded["forwarded_proto"] and forwarded["forwarded_host"]:
        return f"{forwarded['forwarded_proto']}://{forwarded['forwarded_host']}"
    
    if request_scheme and request_host:
        return f"{request_scheme}://{request_host}"
    
    return fallback_base_url.rstrip("/")
