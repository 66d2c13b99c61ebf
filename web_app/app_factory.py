"""FastAPI application factory."""

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import api_router
from .web import web_router
from .middleware.headers import RequestFactsMiddleware
from .middleware.logging import LoggingMiddleware


async def plain_text_http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Plain-text errors for the reflector routes, JSON for /api."""
    if request.url.path.startswith("/api/"):
        return await http_exception_handler(request, exc)
    
    if exc.status_code == 404 and exc.detail == "Not Found":
        body = "Not found"
    else:
        body = str(exc.detail)
    return PlainTextResponse(f"{body}\n", status_code=exc.status_code, headers=getattr(exc, "headers", None))


def create_app(
    service_instance,
    lookup_instance,
    config,
) -> FastAPI:
    """Create and configure FastAPI application.
    
    Args:
        service_instance: ShortLinkService instance
        lookup_instance: IPLookupClient instance
        config: Configuration instance
        
    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Request Reflector",
        description="Reflects request facts, proxies IP lookups and serves short links",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url=None,
        # "/ln/a1b2/" is not a short link path; no slash-stripping redirect
        redirect_slashes=False,
    )
    
    # Store instances in app state for access in routes
    app.state.service = service_instance
    app.state.lookup = lookup_instance
    app.state.config = config
    
    # Logging runs inside the facts middleware so it can report the client IP
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestFactsMiddleware)
    
    app.add_exception_handler(StarletteHTTPException, plain_text_http_exception_handler)
    
    app.include_router(api_router, prefix="/api", tags=["API"])
    app.include_router(web_router, tags=["Reflector"])
    
    return app
