"""Exception handler for structured error responses."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from ..exceptions import FilesManagerException

logger = logging.getLogger(__name__)


async def files_manager_exception_handler(request: Request, exc: FilesManagerException) -> JSONResponse:
    """
    Convert a FilesManagerException into its JSON response.

    Client errors are logged at WARNING, server-side failures at ERROR.
    """
    level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    logger.log(
        level,
        f"{exc.error_code.value}: {exc.message}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code,
        },
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=getattr(exc, "headers", None),
    )
