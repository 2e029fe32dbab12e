from __future__ import annotations

from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from product_catalog.core.logging import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"


def resolve_request_id(request: Request) -> str:
    """
    Request id for this request: the one already assigned, else the caller's
    header, else a new one. Also used by the 500 handler, which runs outside
    RequestIdMiddleware.
    """
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
    return request_id


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = resolve_request_id(request)

        logger.info("request start %s %s [%s]", request.method, request.url.path, request_id)

        response: Response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        logger.info("request end %s %s -> %s [%s]", request.method, request.url.path, response.status_code, request_id)

        return response
