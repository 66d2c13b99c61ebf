"""Reflector routes: plain-text request facts, IP lookups and short links."""

from fastapi import APIRouter, Request, HTTPException, status
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse, Response

from reflector.common.validators import parse_ip_target
from reflector.lookup import LookupServiceError
from reflector.shortlink import RedirectTarget, NotFound
from reflector.storage.base import StorageError

router = APIRouter()

README = (
    "/          - Returns the client's IP address.\n"
    "/agent     - Returns the client's user agent.\n"
    "/headers   - Returns the request headers.\n"
    "/tls       - Returns the request's TLS parameters.\n"
    "/json      - Returns all of the above as JSON.\n"
    "/geo/<ip>  - Geolocation for an IP address or CIDR.\n"
    "/asn/<ip>  - ASN details for an IP address or CIDR.\n"
    "/ln/<id>   - Redirects to a shortened URL.\n"
    "/readme    - Returns this readme message.\n"
)


def _text(body: str, status_code: int = status.HTTP_200_OK) -> PlainTextResponse:
    return PlainTextResponse(f"{body}\n", status_code=status_code)


@router.api_route("/", methods=["GET", "HEAD"], response_class=PlainTextResponse)
async def client_ip(request: Request):
    """Return the client's IP address."""
    return _text(request.state.facts.client_ip)


@router.api_route("/agent", methods=["GET", "HEAD"], response_class=PlainTextResponse)
async def user_agent(request: Request):
    """Return the client's user agent."""
    return _text(request.state.facts.user_agent)


@router.api_route("/headers", methods=["GET", "HEAD"], response_class=PlainTextResponse)
async def headers(request: Request):
    """Return the request headers, one per line."""
    facts = request.state.facts
    return _text("\n".join(f"{name}: {value}" for name, value in facts.headers.items()))


@router.api_route("/tls", methods=["GET", "HEAD"], response_class=PlainTextResponse)
async def tls(request: Request):
    """Return the negotiated TLS parameters."""
    tls_facts = request.state.facts.tls_dict()
    return _text("\n".join(f"{key}: {value}" for key, value in tls_facts.items()))


@router.api_route("/json", methods=["GET", "HEAD"])
async def all_facts(request: Request):
    """Return every request fact as JSON."""
    return JSONResponse(request.state.facts.to_dict())


@router.api_route("/readme", methods=["GET", "HEAD"], response_class=PlainTextResponse)
async def readme():
    """Return the route listing."""
    return PlainTextResponse(README)


@router.api_route("/health", methods=["GET", "HEAD"], include_in_schema=False)
async def health_check_web(request: Request):
    """Health check endpoint (simple version for load balancers)."""
    service = request.app.state.service

    health = service.health_check()

    if health["storage"]:
        return {"status": "healthy"}
    raise HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Service unhealthy",
    )


async def _proxy_lookup(request: Request, kind: str, target: str) -> Response:
    parsed = parse_ip_target(target)
    if parsed is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid IP address or CIDR",
        )

    lookup = request.app.state.lookup
    try:
        query = lookup.geo if kind == "geo" else lookup.asn
        result = await query(parsed)
    except LookupServiceError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Bad Gateway: {e}",
        )

    return Response(
        content=result.content,
        status_code=result.status_code,
        headers=result.headers,
    )


@router.get("/geo/{target:path}")
async def geo_lookup(request: Request, target: str):
    """Proxy an IP or CIDR to the geolocation service."""
    return await _proxy_lookup(request, "geo", target)


@router.get("/asn/{target:path}")
async def asn_lookup(request: Request, target: str):
    """Proxy an IP or CIDR to the ASN service."""
    return await _proxy_lookup(request, "asn", target)


@router.api_route("/ln/{code}", methods=["GET", "HEAD"], include_in_schema=False)
async def redirect_short_link(request: Request, code: str):
    """Redirect to the URL stored for a short code."""
    service = request.app.state.service

    try:
        result = service.resolve_path(request.url.path)
    except StorageError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Short links unavailable",
        )

    if isinstance(result, RedirectTarget):
        # Always temporary so a code can be repointed later
        return RedirectResponse(url=result.url, status_code=result.status_code)

    if isinstance(result, NotFound):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Short link '{result.code}' not found",
        )

    # Not a short link path: generic miss
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
