# blog_service/routes/auth.py

"""
API endpoints для регистрации и авторизации.
"""

from fastapi import APIRouter, Depends, status

from blog_service.config import settings
from blog_service.dependencies import get_credential_manager
from blog_service.schemas import TokenResponse, UserCreate, UserLogin
from blog_service.services.auth_service import CredentialManager
from blog_service.utils.exceptions import InvalidInput

# Router для всех auth-эндпоинтов
router = APIRouter(
    prefix=f"{settings.API_PREFIX}/v1/auth",
    tags=["auth"],
    responses={400: {"description": "Bad Request"}},
)


def _token_response(manager: CredentialManager, user_id) -> dict:
    return {
        "access_token": manager.issue_token(user_id),
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }


# ===============================
# РЕГИСТРАЦИЯ НОВОГО ПОЛЬЗОВАТЕЛЯ
# ===============================

# Вспомогательная функция проверки пароля
def validate_password_strength(password: str) -> None:
    """
    Проверяет базовую сложность пароля.

    Условия:
    - длина не меньше 8 символов;
    - минимум одна буква;
    - минимум одна цифра;
    """

    if len(password) < 8:
        raise InvalidInput("Password must be at least 8 characters")

    if not any(ch.isalpha() for ch in password):
        raise InvalidInput("Password must contain at least one letter")

    if not any(ch.isdigit() for ch in password):
        raise InvalidInput("Password must contain at least one digit")


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register_user(
        user: UserCreate,
        manager: CredentialManager = Depends(get_credential_manager),
):
    """Регистрация, сразу возвращаем токен"""
    validate_password_strength(user.password)

    db_user = manager.register(
        username=user.username,
        email=user.email,
        password=user.password,
    )
    return _token_response(manager, db_user.id)


# ==============================
# Авторизация созданного профиля
# ==============================

@router.post("/login", response_model=TokenResponse, status_code=status.HTTP_200_OK)
def login_user(
        user: UserLogin,
        manager: CredentialManager = Depends(get_credential_manager),
):
    """Логин пользователя"""
    user_id = manager.authenticate(user.username, user.password)
    return _token_response(manager, user_id)
