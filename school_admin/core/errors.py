"""
Error taxonomy shared by the services, the authorization gate and the routers.

Every kind is an HTTPException so FastAPI can render it directly; the
registered handlers only add the stable machine-readable ``error`` code.
"""
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from school_admin.core.logger import logger


class AppError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_ERROR"
    default_detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


# =====================================================
# AUTHENTICATION
# =====================================================

class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"
    default_detail = "Not authenticated"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class InvalidToken(Unauthenticated):
    code = "INVALID_TOKEN"
    default_detail = "Invalid token"


class ExpiredToken(Unauthenticated):
    code = "EXPIRED_TOKEN"
    default_detail = "Session expired. Please login again"


class BadSignature(Unauthenticated):
    code = "BAD_SIGNATURE"
    default_detail = "Token signature verification failed"


class InvalidCredentials(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "INVALID_CREDENTIALS"
    default_detail = "Invalid email or password"


# =====================================================
# AUTHORIZATION / STATE
# =====================================================

class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_detail = "Insufficient permissions"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_detail = "Resource not found"


class Gone(AppError):
    status_code = status.HTTP_410_GONE
    code = "GONE"
    default_detail = "Resource has been deleted"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    default_detail = "Resource already exists"


# =====================================================
# VALIDATION
# =====================================================

class InvalidRequest(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_REQUEST"
    default_detail = "Invalid request"


class TenantRequired(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "TENANT_REQUIRED"
    default_detail = "Institute ID is required. User must belong to an institute."


class InvalidDateRange(AppError):
    status_code = 422
    code = "INVALID_DATE_RANGE"
    default_detail = "Invalid date range"


# =====================================================
# HANDLERS
# =====================================================

def _error_response(status_code: int, code: str, detail: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": code, "detail": detail},
        headers=headers,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_response(exc.status_code, exc.code, exc.detail, exc.headers)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning(
        f"INTEGRITY ERROR | {request.method} {request.url.path} | {exc.orig}"
    )
    return _error_response(
        status.HTTP_409_CONFLICT, Conflict.code, "Resource conflicts with an existing record"
    )


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        f"STORAGE ERROR | {request.method} {request.url.path}",
        exc_info=exc,
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, AppError.code, AppError.default_detail
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
