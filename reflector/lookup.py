"""Proxy IP/CIDR lookups to third-party geolocation and ASN services."""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import httpx

from .common.validators import IPTarget

# Not forwarded from the upstream response
HOP_BY_HOP = frozenset({
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
    "content-encoding",
    "content-length",
})


class LookupServiceError(Exception):
    """Upstream lookup failed after all retries."""


@dataclass
class LookupResult:
    """Upstream response to pass back to the client."""

    status_code: int
    content: bytes
    headers: Dict[str, str] = field(default_factory=dict)


def filter_headers(headers: httpx.Headers) -> Dict[str, str]:
    """Drop hop-by-hop headers from an upstream response."""
    return {k: v for k, v in headers.items() if k.lower() not in HOP_BY_HOP}


class IPLookupClient:
    """Client for the geolocation and ASN lookup services."""

    def __init__(
        self,
        geo_url: str,
        asn_url: str,
        timeout_seconds: float = 5.0,
        max_retries: int = 2,
        logger: Optional[logging.Logger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize lookup client.

        Args:
            geo_url: Geolocation URL template with a ``{target}`` placeholder
            asn_url: ASN URL template with a ``{target}`` placeholder
            timeout_seconds: Timeout per upstream request
            max_retries: Extra attempts after a transport error or 5xx
            logger: Optional logger instance
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.urls = {"geo": geo_url, "asn": asn_url}
        self.max_retries = max_retries
        self.logger = logger or logging.getLogger(__name__)
        self.client = httpx.AsyncClient(
            timeout=timeout_seconds,
            follow_redirects=True,
            transport=transport,
            headers={"User-Agent": "request-reflector/1.0"},
        )

    async def geo(self, target: IPTarget) -> LookupResult:
        return await self.lookup("geo", target)

    async def asn(self, target: IPTarget) -> LookupResult:
        return await self.lookup("asn", target)

    async def lookup(self, kind: str, target: IPTarget) -> LookupResult:
        """Query one upstream service for ``target``.

        Transport errors and 5xx responses are retried up to ``max_retries``
        times; 4xx responses are returned as-is.

        Args:
            kind: ``geo`` or ``asn``
            target: Parsed IP address or network

        Returns:
            Upstream status, body and filtered headers

        Raises:
            LookupServiceError: If every attempt failed
        """
        url = self.urls[kind].format(target=target.compressed)
        attempts = self.max_retries + 1
        last_error = "no attempts made"

        for attempt in range(1, attempts + 1):
            try:
                response = await self.client.get(url)
            except httpx.HTTPError as e:
                last_error = f"{type(e).__name__}: {e}"
                self.logger.warning(f"{kind} lookup for {target} failed (attempt {attempt}/{attempts}): {last_error}")
                continue

            if response.status_code >= 500:
                last_error = f"upstream returned {response.status_code}"
                self.logger.warning(f"{kind} lookup for {target} failed (attempt {attempt}/{attempts}): {last_error}")
                continue

            self.logger.debug(f"{kind} lookup for {target}: {response.status_code}")
            return LookupResult(
                status_code=response.status_code,
                content=response.content,
                headers=filter_headers(response.headers),
            )

        raise LookupServiceError(f"{kind} lookup for {target} failed after {attempts} attempts: {last_error}")

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
