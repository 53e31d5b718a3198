import logging

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from shared.core.exceptions import APIError
from shared.helpers.json_response_helper import error_result
from shared.utils.app_status_code import AppStatusCode

logger = logging.getLogger(__name__)


def setup_exception_handlers(app: FastAPI):

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        app_status = getattr(exc, "app_status_code",
                             AppStatusCode.OPERATION_FAILED)
        if isinstance(exc, APIError):
            logger.info("%s %s -> %s: %s", request.method,
                        request.url.path, exc.status_code, exc.detail)
        wrapped = error_result(str(exc.detail), app_status)
        return JSONResponse(content=wrapped, status_code=exc.status_code or 400, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        wrapped = error_result(str(exc.errors()), AppStatusCode.INVALID_INPUT)
        return JSONResponse(content=wrapped, status_code=422)

    # Catch all unhandled exceptions
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s",
                         request.method, request.url.path)
        wrapped = error_result("Internal server error",
                               AppStatusCode.OPERATION_FAILED)
        return JSONResponse(content=wrapped, status_code=500)
