"""Configuration management for the request reflector."""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Config(BaseSettings):
    """Application configuration."""

    # Storage settings
    mappings_file: str = Field(
        default="url_mappings.json",
        description="JSON file holding the short link mapping set"
    )

    # Server settings
    host: str = Field(
        default="0.0.0.0",
        description="Host to bind to"
    )

    port: int = Field(
        default=8787,
        description="Port to listen on"
    )

    workers: int = Field(
        default=1,
        ge=1,
        description="Number of uvicorn worker processes"
    )

    # Short link settings
    base_url: str = Field(
        default="http://localhost:8787",
        description="Base URL for reporting short links"
    )

    max_allocation_attempts: int = Field(
        default=100,
        ge=1,
        description="Random draws before giving up on a free short code"
    )

    enable_admin_api: bool = Field(
        default=False,
        description="Expose /api/links for listing and adding short links (unauthenticated)"
    )

    # Request facts
    client_ip_headers: List[str] = Field(
        default=["cf-connecting-ip", "true-client-ip", "x-real-ip", "x-forwarded-for"],
        description="Headers consulted, in order, for the client IP"
    )

    tls_version_header: str = Field(
        default="x-tls-version",
        description="Header the edge proxy uses to pass the negotiated TLS version"
    )

    tls_cipher_header: str = Field(
        default="x-tls-cipher",
        description="Header the edge proxy uses to pass the negotiated cipher"
    )

    # Third-party lookups
    geo_lookup_url: str = Field(
        default="http://ip-api.com/json/{target}",
        description="Geolocation service URL template ({target} is the IP or CIDR)"
    )

    asn_lookup_url: str = Field(
        default="https://api.hackertarget.com/aslookup/?q={target}",
        description="ASN service URL template ({target} is the IP or CIDR)"
    )

    lookup_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Timeout for a single upstream lookup request"
    )

    lookup_max_retries: int = Field(
        default=2,
        ge=0,
        description="Extra attempts after a failed upstream lookup"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )

    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }


def load_config(**overrides) -> Config:
    """Load configuration from environment."""
    return Config(**overrides)
