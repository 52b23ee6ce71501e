"""Routes serving the podcast feeds."""

import logging
import re

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response

from mediathek2rss.core.errors import FeedError, InvalidIdentifierError
from mediathek2rss.models.parameters import RequestParameters
from mediathek2rss.services.feeds import FeedService

logger = logging.getLogger(__name__)

router = APIRouter()

RSS_MEDIA_TYPE = "application/rss+xml"

ARD_SHOW_ID = re.compile(r"[a-zA-Z0-9]+")
ZDF_SHOW_PATH = re.compile(r"([a-zA-Z0-9-]+/)*[a-zA-Z0-9-]+")


def validate_ard_show_id(show_id: str) -> str:
    if not ARD_SHOW_ID.fullmatch(show_id):
        raise InvalidIdentifierError(f"Invalid ARD show id: {show_id!r}")
    return show_id


def validate_zdf_show_path(show_path: str) -> str:
    if not ZDF_SHOW_PATH.fullmatch(show_path):
        raise InvalidIdentifierError(f"Invalid ZDF show path: {show_path!r}")
    return show_path


def get_request_parameters(request: Request) -> RequestParameters:
    """Read width and minLength from the query, falling back to defaults."""
    return RequestParameters.from_query(request.query_params)


def get_ard_feed_service(request: Request) -> FeedService:
    return request.app.state.feed_services["ARD"]


def get_zdf_feed_service(request: Request) -> FeedService:
    return request.app.state.feed_services["ZDF"]


async def _serve_feed(
    service: FeedService, show_identifier: str, parameters: RequestParameters
) -> Response:
    try:
        content = await service.serve(show_identifier, parameters)
    except FeedError as e:
        logger.error(
            f"Could not create {service.provider.name} feed for {show_identifier}: {e}"
        )
        return PlainTextResponse(str(e), status_code=500)
    return Response(content=content, media_type=RSS_MEDIA_TYPE)


@router.get("/ard/show/{show_id}")
async def ard_show_feed(
    show_id: str,
    parameters: RequestParameters = Depends(get_request_parameters),
    service: FeedService = Depends(get_ard_feed_service),
):
    """RSS feed of an ARD show."""
    try:
        validate_ard_show_id(show_id)
    except InvalidIdentifierError as e:
        return PlainTextResponse(str(e), status_code=400)
    return await _serve_feed(service, show_id, parameters)


@router.get("/zdf/show/{show_path:path}")
async def zdf_show_feed(
    show_path: str,
    parameters: RequestParameters = Depends(get_request_parameters),
    service: FeedService = Depends(get_zdf_feed_service),
):
    """RSS feed of a ZDF show, identified by its path below zdf.de."""
    try:
        validate_zdf_show_path(show_path)
    except InvalidIdentifierError as e:
        return PlainTextResponse(str(e), status_code=400)
    return await _serve_feed(service, show_path, parameters)
