"""FastAPI service exposing health, version and wire-value decode endpoints."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from pydantic import BaseModel

from randomorg_wire.core.config import get_settings
from randomorg_wire.core.logging import configure_logging
from randomorg_wire.core.responses import ResponseDecoder, to_json_value
from randomorg_wire.core.time_utils import format_wire_timestamp
from randomorg_wire.services.api.error_handlers import register_error_handlers

settings = get_settings()
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

parser = settings.wire_parser()
decoder = ResponseDecoder(parser)


class WireValueRequest(BaseModel):
    """A single wire-format value."""

    value: str


class CapturedResponse(BaseModel):
    """An RPC method name with the ``result`` member of its response."""

    method: str
    result: dict[str, Any]


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Log startup metadata for operational visibility."""

    logger.info(
        "api_startup",
        extra={
            "service": "api",
            "env": settings.ENV,
            "version": settings.VERSION,
            "parser": repr(parser),
        },
    )
    yield


app = FastAPI(title=settings.APP_NAME, version=settings.VERSION, lifespan=lifespan)
register_error_handlers(app)


@app.get("/health")
def health() -> dict[str, str]:
    """Return process liveness status."""

    return {"status": "ok"}


@app.get("/version")
def version() -> dict[str, str]:
    """Return application metadata from shared settings."""

    return {
        "name": settings.APP_NAME,
        "version": settings.VERSION,
        "env": settings.ENV,
    }


@app.post("/decode/timestamp")
def decode_timestamp(request: WireValueRequest) -> dict[str, str]:
    """Normalize a wire timestamp to UTC."""

    moment = parser.parse_timestamp(request.value, "value")
    return {"utc": format_wire_timestamp(moment), "iso": moment.isoformat()}


@app.post("/decode/api-key-status")
def decode_api_key_status(request: WireValueRequest) -> dict[str, str]:
    """Map a wire API key status token to its enumeration member."""

    status = parser.parse_api_key_status(request.value, "value")
    return {"status": status.value, "name": status.name}


@app.post("/decode/response")
def decode_response(request: CapturedResponse) -> dict[str, Any]:
    """Decode a captured getUsage or generate* result."""

    decoded = decoder.decode_response(request.method, request.result)
    return {"method": request.method, "result": to_json_value(decoded)}
