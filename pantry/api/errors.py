"""
Exception handlers mapping errors to JSON responses.

Every failure body has the form {"error": <kind>, "message": <text>}.
"""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pantry.exceptions import PantryError, UnauthenticatedError
from pantry.utils import get_logger

HTTP_STATUS_KINDS = {
    400: "invalid_argument",
    401: "unauthenticated",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
}


def setup_exception_handlers(app: FastAPI) -> None:
    logger = get_logger("api")

    @app.exception_handler(PantryError)
    async def pantry_error_handler(request: Request, exc: PantryError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected ({exc.kind}): {exc.message}")

        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
        return JSONResponse(
            content=jsonable_encoder(exc.to_dict()),
            status_code=exc.status_code,
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            content={
                "error": "invalid_argument",
                "message": "Validation failed",
                "details": jsonable_encoder(exc.errors()),
            },
            status_code=400,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            content={
                "error": HTTP_STATUS_KINDS.get(exc.status_code, "http_error"),
                "message": str(exc.detail),
            },
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    # Catch all unhandled exceptions
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            content={"error": "internal", "message": "Internal server error"},
            status_code=500,
        )
