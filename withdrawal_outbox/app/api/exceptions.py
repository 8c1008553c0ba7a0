from __future__ import annotations

import logging
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core.errors import (
    AccountNotFound,
    InsufficientFunds,
    InvalidInput,
    WithdrawalFailure,
)
from ..models import ErrorResponse


logger = logging.getLogger(__name__)

_FAILURE_STATUS = {
    AccountNotFound: status.HTTP_404_NOT_FOUND,
    InsufficientFunds: status.HTTP_409_CONFLICT,
    InvalidInput: status.HTTP_400_BAD_REQUEST,
}


def failure_response(failure: WithdrawalFailure) -> JSONResponse:
    body = ErrorResponse(request_id=failure.request_id, detail=failure.message)
    return JSONResponse(
        status_code=_FAILURE_STATUS[type(failure)],
        content=body.model_dump(mode="json", by_alias=True),
    )


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return "; ".join(messages)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        failure = InvalidInput(str(uuid4()), _validation_message(exc))
        logger.info(
            "request.invalid",
            extra={"request_id": failure.request_id, "detail": failure.reason},
        )
        return failure_response(failure)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("request.failed", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Unexpected error occurred"})
