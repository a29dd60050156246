"""API request handlers."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.api.models import SearchRequest
from src.api.rendering import (
    INVALID_QUERY_MESSAGE,
    SERVER_CRASHED_MESSAGE,
    render_outcome,
)
from src.services.quota import client_id_from
from src.services.relay import QueryRelay

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"


def get_client_id(request: Request) -> str:
    """Get the quota bucket key for a request.

    Repeated X-Forwarded-For headers are joined before taking the first entry.
    """
    peer_host = request.client.host if request.client else None
    forwarded_for = ", ".join(request.headers.getlist("X-Forwarded-For"))
    return client_id_from(forwarded_for, peer_host)


def _is_json_request(request: Request) -> bool:
    content_type = request.headers.get("Content-Type", "")
    return content_type.split(";")[0].strip().lower() == JSON_MEDIA_TYPE


async def parse_search_request(request: Request) -> SearchRequest | None:
    """Parse and validate the JSON body, or None if it is not a valid search request.

    Bodies not sent as application/json are treated as empty.
    """
    if not _is_json_request(request):
        return None
    try:
        body = await request.json()
    except ValueError:
        return None
    try:
        return SearchRequest.model_validate(body)
    except ValidationError:
        return None


def create_health_handler():
    """Create health check handler."""

    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return health


def create_search_handler(relay: QueryRelay):
    """Create search handler with relay dependency.

    Args:
        relay: Query relay owning the quota tracker and upstream clients

    Returns:
        Search handler function
    """

    async def search(http_request: Request) -> JSONResponse:
        """Search endpoint: answer a query with Groq ("ai") or Tavily ("web").

        Quota exhaustion and upstream failures are reported in the body with
        status 200. Only an invalid request (400) or a crash (500) change the
        status code.
        """
        try:
            relay.reset_if_expired()
            search_request = await parse_search_request(http_request)
            if search_request is None:
                return JSONResponse(status_code=400, content={"answer": INVALID_QUERY_MESSAGE})

            client_id = get_client_id(http_request)
            outcome = await relay.handle(search_request.query, search_request.mode, client_id)
            logger.info(f"Search mode={search_request.mode!r} client={client_id} outcome={outcome.kind.value}")
            return JSONResponse(content=render_outcome(outcome))
        except Exception:
            logger.exception("Unhandled error in search handler")
            return JSONResponse(status_code=500, content={"answer": SERVER_CRASHED_MESSAGE})

    return search
