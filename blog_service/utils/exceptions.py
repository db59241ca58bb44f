import logging
from datetime import datetime, timezone

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

'''
Вспомогательная функция _error_response()

Принимает параметры status_code, detail, code, request. Возвращает стандартный FastAPI-ответ с JSON-телом.

Собираем единый формат ошибки.
'''
def _error_response(
    *,
    status_code: int,
    detail: str,
    code: str,
    request: Request,
    headers: dict | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": detail,
            "code": code,
            "path": request.url.path,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        headers=headers,
    )

# Базовый класс AppError
class AppError(Exception):
    status_code = 400
    code = "app_error"
    detail = "Application error"

    def __init__(self, detail: str | None = None, code: str | None = None):
        if detail is not None:
            self.detail = detail
        if code is not None:
            self.code = code
        super().__init__(self.detail)


# ================
# Кастомные ошибки
# ================

class InvalidInput(AppError):
    status_code = 422
    code = "invalid_input"
    detail = "Invalid input"


class DuplicateUsername(AppError):
    status_code = 409
    code = "duplicate_username"
    detail = "Username already registered"


class DuplicateEmail(AppError):
    status_code = 409
    code = "duplicate_email"
    detail = "Email already registered"


class InvalidCredentials(AppError):
    """
    Одна и та же ошибка для "нет такого пользователя" и "неверный пароль".
    """
    status_code = 401
    code = "invalid_credentials"
    detail = "Incorrect username or password"


class NotFound(AppError):
    status_code = 404
    code = "not_found"
    detail = "Resource not found"


class Forbidden(AppError):
    status_code = 403
    code = "forbidden"
    detail = "You are not allowed to perform this action"


class AuthorNotFound(AppError):
    status_code = 404
    code = "author_not_found"
    detail = "Author does not exist"


class StoreUnavailable(AppError):
    status_code = 503
    code = "store_unavailable"
    detail = "Storage is temporarily unavailable"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = None
    if isinstance(exc, InvalidCredentials):
        headers = {"WWW-Authenticate": "Bearer"}
    return _error_response(
        status_code=exc.status_code,
        detail=exc.detail,
        code=exc.code,
        request=request,
        headers=headers,
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _error_response(
        status_code=exc.status_code,
        detail=detail,
        code="http_error",
        request=request,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    return _error_response(
        status_code=422,
        detail="Validation error",
        code="validation_error",
        request=request,
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    # Текст исключения наружу не отдаем, только в лог
    logger.exception("Unhandled error on %s", request.url.path)
    return _error_response(
        status_code=500,
        detail="Internal server error",
        code="internal_server_error",
        request=request,
    )
