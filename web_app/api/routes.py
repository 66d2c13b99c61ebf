"""API routes implementation."""

from fastapi import APIRouter, Request, HTTPException, status
from datetime import datetime, timezone

from .schemas import (
    ShortenRequest,
    ShortLinkResponse,
    LinkListResponse,
    HealthResponse,
    ErrorResponse,
)
from reflector.common.headers import build_base_url
from reflector.common.url_builder import build_short_url
from reflector.common.validators import is_valid_url
from reflector.shortlink import ExhaustionError, short_path
from reflector.storage.base import StorageError

router = APIRouter()


def _require_admin_api(request: Request) -> None:
    """Admin routes are unauthenticated, so they only exist when enabled."""
    if not request.app.state.config.enable_admin_api:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)


@router.post(
    "/links",
    response_model=ShortLinkResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid URL"},
        500: {"model": ErrorResponse, "description": "Mapping set could not be saved"},
        507: {"model": ErrorResponse, "description": "Short code space exhausted"},
    },
    summary="Create short link",
    description="Allocate a 4-digit hex code for a URL and persist the mapping set.",
)
async def create_link(request: Request, body: ShortenRequest):
    """Create a short link."""
    _require_admin_api(request)
    service = request.app.state.service
    config = request.app.state.config
    
    is_valid, error = is_valid_url(body.url)
    if not is_valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid URL: {error}",
        )
    
    # Runs without awaiting so allocations in this process never interleave
    try:
        link = service.create_short_link(body.url)
    except ExhaustionError as e:
        raise HTTPException(
            status_code=status.HTTP_507_INSUFFICIENT_STORAGE,
            detail=str(e),
        )
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )
    
    base_url = build_base_url(
        headers=dict(request.headers),
        fallback_base_url=config.base_url,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
    )
    
    return ShortLinkResponse(
        code=link.code,
        url=link.url,
        short_path=short_path(link.code),
        short_url=build_short_url(link.code, base_url),
    )


@router.get(
    "/links",
    response_model=LinkListResponse,
    summary="List short links",
)
async def list_links(request: Request):
    """List every short link in the mapping set."""
    _require_admin_api(request)
    service = request.app.state.service
    
    try:
        links = service.list_links()
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )
    
    return LinkListResponse(
        count=len(links),
        links=[ShortLinkResponse(short_path=short_path(link.code), **link.to_dict()) for link in links],
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check that the mapping set is readable.",
)
async def health_check(request: Request):
    """Health check endpoint for monitoring."""
    service = request.app.state.service
    
    health = service.health_check()
    
    return HealthResponse(
        status="healthy" if health["storage"] else "unhealthy",
        storage="healthy" if health["storage"] else "unhealthy",
        mappings=health["mappings"],
        timestamp=datetime.now(timezone.utc),
    )
