# blog_service/utils/security.py

"""
Утилиты для безопасности: хэширование пароля и JWT токены
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

from blog_service.config import settings

# Контекст argon2 (memory-hard, соль своя на каждый вызов).
# После создания контекст только читается, общий объект безопасен между потоками.
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

# Хэш, с которым сверяем пароль, если пользователь не найден:
# время ответа не должно выдавать, существует ли username
DUMMY_PASSWORD_HASH = pwd_context.hash(uuid.uuid4().hex)

# =============================
# ФУНКЦИЯ ДЛЯ РАБОТЫ С ПАРОЛЯМИ
# =============================

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

# Проверка, что введённый пароль совпадает с хэшем в БД.
# Сравнение итогового хэша внутри argon2 выполняется за постоянное время.
def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Битый или неизвестный формат хэша в БД
        return False

# =============================
# ФУНКЦИИ ДЛЯ РАБОТЫ С JWT
# =============================

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)

    # Определяем время истечения токена
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    # Добавляем в токен время выпуска и истечения
    to_encode.update({
        "iat": now,
        "exp": expire,
        "token_type": "access",
    })

    # Кодируем в JWT
    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    return encoded_jwt


def decode_token(token: str) -> Optional[dict]:
    """
    Декодируем JWT токен и проверяем подпись
    """

    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
        return payload
    except jwt.ExpiredSignatureError:
        # Токен истек
        return None
    except jwt.InvalidTokenError:
        # Токен подделан
        return None
