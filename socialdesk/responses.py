"""
SocialDesk API Response Utilities
Error envelope and exception handlers
"""
from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from typing import Dict
from datetime import datetime, timezone

from .logging_config import api_logger, db_logger
from .scheduling.errors import SchedulingError, PersistenceError


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def error_body(exc: SchedulingError) -> Dict:
    body = {
        "ok": False,
        "error": exc.message,
        "error_code": exc.error_code,
        "timestamp": _timestamp(),
    }
    if exc.details:
        body["details"] = exc.details
    return body


async def scheduling_exception_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    """Map the error taxonomy onto HTTP responses"""
    log = api_logger.error if exc.status_code >= 500 else api_logger.warning
    log(
        f"API Error: {exc.message}",
        status_code=exc.status_code,
        error_code=exc.error_code,
        path=request.url.path,
    )
    return JSONResponse(status_code=exc.status_code, content=error_body(exc))


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Datastore failures surface as a 500 with no partial-state cleanup beyond rollback"""
    db_logger.error("Database error", error=exc, path=request.url.path)
    return JSONResponse(
        status_code=500,
        content=error_body(PersistenceError("A database error occurred")),
    )
