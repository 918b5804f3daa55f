"""Global exception handlers mapping decoding failures to structured JSON responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from randomorg_wire.core.errors import FormatError, UnsupportedValueError, WireValueError

logger = logging.getLogger(__name__)

_ERROR_STATUS: dict[type[WireValueError], int] = {
    FormatError: 422,
    UnsupportedValueError: 400,
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    _register_wire_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_wire_error_handler(app: FastAPI) -> None:
    @app.exception_handler(WireValueError)
    async def wire_error_handler(request: Request, exc: WireValueError) -> JSONResponse:
        status_code = _ERROR_STATUS.get(type(exc), 422)
        logger.warning(
            "api_wire_value_rejected",
            extra={"path": request.url.path, "error": exc.to_dict()},
        )
        return JSONResponse(status_code=status_code, content={"error": exc.to_dict()})


def _register_validation_error_handler(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning("api_request_invalid", extra={"path": request.url.path})
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "type": "RequestValidationError",
                    "reason": "invalid request body",
                    "details": [
                        {
                            "field": ".".join(str(loc) for loc in error["loc"]),
                            "message": error["msg"],
                        }
                        for error in exc.errors()
                    ],
                }
            },
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all that never leaks internal details."""

        logger.error("api_unhandled_exception", extra={"path": request.url.path}, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": {"type": "InternalError", "reason": "an unexpected error occurred"}},
        )
