# dailyproxy/routes_data.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response

from dailyproxy.errors import ProxyError, error_response
from dailyproxy.handler import DataHandler

router = APIRouter(tags=["data"])
logger = logging.getLogger(__name__)

# The handler ignores method, body and query; accept whatever the frontend sends.
_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


@router.api_route("/api/data", methods=_METHODS)
async def data(request: Request) -> Response:
    """Serve the rolling daily series, refreshing it at most once per calendar day."""
    handler: DataHandler = request.app.state.data_handler
    try:
        record = await handler.handle()
    except ProxyError as e:
        logger.error("Data request failed: %s", e.message, extra={"code": e.code.value})
        return error_response(e.message)
    except Exception as e:
        logger.exception("Unexpected error while serving data")
        return error_response(str(e))

    return Response(content=record.model_dump_json(), media_type="application/json")
