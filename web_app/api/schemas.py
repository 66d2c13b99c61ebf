"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime


class ShortenRequest(BaseModel):
    """Request to add a URL to the mapping set."""
    
    url: str = Field(..., description="The URL to shorten", min_length=1)
    
    @field_validator('url')
    @classmethod
    def strip_url(cls, v: str) -> str:
        return v.strip()
    
    model_config = {
        "json_schema_extra": {
            "examples": [
                {"url": "https://www.example.com/very/long/path"},
            ]
        }
    }


class ShortLinkResponse(BaseModel):
    """One short link."""
    
    code: str = Field(..., description="The 4-digit hex short code")
    url: str = Field(..., description="The target URL")
    short_path: str = Field(..., description="Path the short link is served under")
    short_url: Optional[str] = Field(None, description="The complete short URL")
    
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "code": "a1b2",
                    "url": "https://www.google.com",
                    "short_path": "/ln/a1b2",
                    "short_url": "https://example.com/ln/a1b2",
                }
            ]
        }
    }


class LinkListResponse(BaseModel):
    """All short links."""
    
    count: int
    links: List[ShortLinkResponse]


class HealthResponse(BaseModel):
    """Health check response."""
    
    status: str = Field(..., description="Overall status")
    storage: str = Field(..., description="Mapping store status")
    mappings: int = Field(..., description="Number of stored short links")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""
    
    detail: str = Field(..., description="Error message")
