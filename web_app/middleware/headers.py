"""Request facts middleware."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable

from reflector.request_info import collect_request_facts


class RequestFactsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect client IP, user agent, TLS and header facts."""
    
    async def dispatch(self, request: Request, call_next: Callable):
        """Store the request facts in request state for routes and logging."""
        config = request.app.state.config
        request.state.facts = collect_request_facts(request, config)
        
        response = await call_next(request)
        return response
