import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.errors import WorkflowError

logger = logging.getLogger("expenses.api")


def _get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _respond(request: Request, status_code: int, payload: dict) -> JSONResponse:
    request_id = _get_request_id(request)
    payload["request_id"] = request_id

    response = JSONResponse(status_code=status_code, content=payload)
    if request_id:
        response.headers["X-Request-ID"] = request_id
    return response


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(WorkflowError)
    async def workflow_error_handler(request: Request, exc: WorkflowError):
        if exc.status_code >= 500:
            logger.error(
                "workflow_error request_id=%s code=%s detail=%s",
                _get_request_id(request),
                exc.code,
                exc.message,
            )
        return _respond(request, exc.status_code, exc.to_payload())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _respond(request, exc.status_code, {"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Malformed input shares the VALIDATION_ERROR contract with domain checks.
        return _respond(
            request,
            400,
            {"detail": "Request validation failed", "code": "VALIDATION_ERROR", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled_exception request_id=%s", _get_request_id(request), exc_info=exc)
        return _respond(request, 500, {"detail": "Internal Server Error"})
