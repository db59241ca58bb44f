"""
Главный файл приложения
Здесь инициализируется FastAPI и подключаются маршруты
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from dotenv import load_dotenv
load_dotenv()

from blog_service.config import settings
from blog_service.models import Base
from blog_service.routes import auth, posts, users
from blog_service.utils.database import engine
from blog_service.utils.exceptions import (
    app_error_handler,
    http_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
    AppError,
)

# =========
# ЛОГИРОВАНИЕ
# =========

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Таблицы и индексы из models.py
    Base.metadata.create_all(bind=engine)
    logger.info("Blog API started")
    yield
    engine.dispose()


# Создаем приложение
app = FastAPI(
    title="Blog API",
    description="Simple blog with authors and posts",
    version="1.0.0",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=f"{settings.API_PREFIX}/redoc",
    lifespan=lifespan,
)


# Глобальные обработчики ошибок

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# CORS (чтобы фронтенд мог обращаться к API)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.DEBUG else settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    )


# ==============
# HEALTH-CHECKING
# ==============

@app.get("/health")
async def health_check():
    """Проверка, что приложение живо"""
    return {"status": "ok"}


# =====================
# Подключаем все ROUTES
# =====================

app.include_router(auth.router) # Регистрация и авторизация
app.include_router(users.router) # Текущий пользователь
app.include_router(posts.router) # Посты


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
