"""Validation utilities for the request reflector."""

import ipaddress
from urllib.parse import urlparse
from typing import Optional, Tuple, Union

IPTarget = Union[ipaddress.IPv4Address, ipaddress.IPv6Address, ipaddress.IPv4Network, ipaddress.IPv6Network]

MAX_URL_LENGTH = 2048


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a URL before it is added to the mapping set.
    
    Args:
        url: The URL to validate
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"
    
    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"
    
    try:
        result = urlparse(url)
    except ValueError as e:
        return False, f"Invalid URL format: {e}"
    
    if result.scheme not in ("http", "https"):
        return False, "URL must use http or https protocol"
    
    if not result.netloc:
        return False, "URL must have a valid domain"
    
    return True, ""


def parse_ip_target(target: str) -> Optional[IPTarget]:
    """Parse a lookup target as an IP address or a CIDR network.
    
    Host bits are allowed in networks (``10.1.2.3/8`` becomes ``10.0.0.0/8``).
    
    Args:
        target: Raw path segment, e.g. ``1.1.1.1`` or ``2001:db8::/32``
        
    Returns:
        Parsed address or network, or None if the target is neither
    """
    if not target:
        return None
    
    target = target.strip().strip("[]")
    try:
        if "/" in target:
            return ipaddress.ip_network(target, strict=False)
        return ipaddress.ip_address(target)
    except ValueError:
        return None
