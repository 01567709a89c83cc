"""Error handling middleware.

Every error response carries a single human-readable sentence in ``error``.
"""

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from medgestor.core.exceptions import AppException

logger = structlog.get_logger()

VALUE_ERROR_PREFIX = "Value error, "


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle custom application exceptions.

    Args:
        request: Request object
        exc: Application exception

    Returns:
        JSON error response
    """
    logger.info(
        "client_error",
        code=exc.__class__.__name__,
        status_code=exc.status_code,
        message=exc.message,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.message,
            "code": exc.__class__.__name__,
            "path": str(request.url),
        },
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """
    Handle HTTP exceptions.

    Args:
        request: Request object
        exc: HTTP exception

    Returns:
        JSON error response
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.detail,
            "code": "HTTPException",
            "path": str(request.url),
        },
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """
    Handle request schema errors as 400, reporting the first failure.

    Args:
        request: Request object
        exc: Validation exception

    Returns:
        JSON error response with validation details
    """
    errors = exc.errors()
    message = "Dados da requisição inválidos."
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        msg = str(first.get("msg"))
        if first.get("type") == "value_error":
            # Our own validators already carry the user-facing sentence
            msg = msg.removeprefix(VALUE_ERROR_PREFIX)
            field = ""
        message = f"{field}: {msg}" if field else msg

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": message,
            "code": "ValidationError",
            "details": [
                {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
                for e in errors
            ],
            "path": str(request.url),
        },
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions, including storage failures.

    Args:
        request: Request object
        exc: Exception

    Returns:
        JSON error response without internal details
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        error=str(exc),
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Erro interno do servidor.",
            "code": "InternalServerError",
            "path": str(request.url),
        },
    )
