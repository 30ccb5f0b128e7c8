"""Readers turning a Starlette request into URLEncoded form data."""

import structlog
from starlette.requests import Request

from ..form_data import URLEncoded

logger = structlog.get_logger(__name__)

FORM_URLENCODED = "application/x-www-form-urlencoded"


async def query_data(request: Request) -> URLEncoded:
    """Form data from the query string."""
    return URLEncoded.parse(request.url.query)


async def body_data(request: Request) -> URLEncoded:
    """
    Form data from a URL-encoded body.

    Other content types (JSON, multipart, ...) yield empty form data.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.split(";")[0].strip().lower() != FORM_URLENCODED:
        logger.debug("Ignoring non URL-encoded body", content_type=content_type)
        return URLEncoded()
    return URLEncoded.parse(await request.body())


async def form_data(request: Request) -> URLEncoded:
    """Query data for GET/HEAD requests, body data otherwise."""
    if request.method in ("GET", "HEAD"):
        return await query_data(request)
    return await body_data(request)
