import logging
from typing import Any, Dict, Optional
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class UnauthorizedException(HTTPException):
    def __init__(self, detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail or "Unauthorized",
            headers=headers or {"WWW-Authenticate": "Bearer"},
        )

class ForbiddenException(HTTPException):
    def __init__(self, detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail or "Forbidden", headers=headers)

class NotFoundException(HTTPException):
    def __init__(self, detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail or "Not found", headers=headers)

class ConflictException(HTTPException):
    def __init__(self, detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail or "Conflict", headers=headers)

class ValidationException(HTTPException):
    def __init__(self, detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail or "Validation error", headers=headers)

class InternalServerException(HTTPException):
    def __init__(self, detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail or "Internal server error",
            headers=headers,
        )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation error", "errors": jsonable_encoder(exc.errors())},
    )


async def store_failure_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Store failure while handling %s %s", request.method, request.url.path)
    error = InternalServerException()
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, store_failure_handler)
