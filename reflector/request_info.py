"""Facts about an incoming request: client IP, user agent, TLS, headers."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from starlette.requests import Request

from .common.headers import extract_forwarded_headers, first_header_value

UNKNOWN = "Unknown"

# ASGI TLS extension reports the protocol as its wire value
TLS_VERSIONS = {
    0x0300: "SSLv3",
    0x0301: "TLSv1.0",
    0x0302: "TLSv1.1",
    0x0303: "TLSv1.2",
    0x0304: "TLSv1.3",
}


@dataclass
class RequestFacts:
    """Everything the reflector reports about one request."""

    client_ip: str
    user_agent: str
    scheme: str
    tls_version: str
    tls_cipher: str
    headers: Dict[str, str] = field(default_factory=dict)

    def tls_dict(self) -> Dict[str, str]:
        return {
            "scheme": self.scheme,
            "tls_version": self.tls_version,
            "tls_cipher": self.tls_cipher,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "client_ip": self.client_ip,
            "user_agent": self.user_agent,
            "tls": self.tls_dict(),
            "headers": dict(self.headers),
        }


def get_client_ip(request: Request, header_names: Iterable[str]) -> str:
    """Client IP from the edge headers, falling back to the socket peer."""
    ip = first_header_value(dict(request.headers), header_names)
    if ip:
        return ip
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN


def get_user_agent(request: Request) -> str:
    return request.headers.get("user-agent") or UNKNOWN


def _tls_extension(request: Request) -> Optional[Dict[str, Any]]:
    extensions = request.scope.get("extensions") or {}
    return extensions.get("tls")


def get_tls_facts(
    request: Request,
    version_header: str = "x-tls-version",
    cipher_header: str = "x-tls-cipher",
) -> Dict[str, str]:
    """Negotiated TLS parameters.

    Uses the ASGI ``tls`` extension when the server terminates TLS itself,
    otherwise the headers set by the terminating edge proxy.

    Args:
        request: Incoming request
        version_header: Header carrying the TLS version
        cipher_header: Header carrying the cipher name

    Returns:
        Dictionary with scheme, tls_version, tls_cipher
    """
    forwarded = extract_forwarded_headers(dict(request.headers))
    scheme = forwarded["forwarded_proto"] or request.url.scheme

    version = request.headers.get(version_header)
    cipher = request.headers.get(cipher_header)

    tls = _tls_extension(request)
    if tls:
        raw_version = tls.get("tls_version")
        if raw_version is not None:
            version = TLS_VERSIONS.get(raw_version, f"0x{raw_version:04x}")
        raw_cipher = tls.get("cipher_suite")
        if raw_cipher is not None:
            cipher = f"0x{raw_cipher:04x}"

    return {
        "scheme": scheme or UNKNOWN,
        "tls_version": version or UNKNOWN,
        "tls_cipher": cipher or UNKNOWN,
    }


def collect_request_facts(request: Request, config) -> RequestFacts:
    """Gather all reflected facts for ``request`` using ``config`` header settings."""
    tls = get_tls_facts(request, config.tls_version_header, config.tls_cipher_header)
    return RequestFacts(
        client_ip=get_client_ip(request, config.client_ip_headers),
        user_agent=get_user_agent(request),
        scheme=tls["scheme"],
        tls_version=tls["tls_version"],
        tls_cipher=tls["tls_cipher"],
        headers={name: value for name, value in sorted(request.headers.items())},
    )
