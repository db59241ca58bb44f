# blog_service/services/auth_service.py

"""
Сервисный слой для регистрации и логина.

Знает про модели, БД, хэширование и JWT, но не про HTTP.
Сессия БД передаётся явно в конструктор.
"""

import logging
import uuid
from datetime import timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blog_service.models import User
from blog_service.utils.database import atomic
from blog_service.utils.exceptions import (
    DuplicateEmail,
    DuplicateUsername,
    InvalidCredentials,
    InvalidInput,
    NotFound,
)
from blog_service.utils.security import (
    DUMMY_PASSWORD_HASH,
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

# Имена уникальных ограничений из models.py -> типизированная ошибка
UNIQUE_CONSTRAINT_ERRORS = {
    "uq_users_username": DuplicateUsername,
    "uq_users_email": DuplicateEmail,
}
# SQLite не отдает имя ограничения, только "UNIQUE constraint failed: users.email"
SQLITE_UNIQUE_COLUMNS = {
    "users.username": DuplicateUsername,
    "users.email": DuplicateEmail,
}


def constraint_name(exc: IntegrityError) -> Optional[str]:
    """
    Имя сработавшего ограничения из диагностики драйвера (psycopg2/psycopg).
    """
    diag = getattr(exc.orig, "diag", None)
    return getattr(diag, "constraint_name", None)


def duplicate_user_error(exc: IntegrityError) -> Exception:
    name = constraint_name(exc)
    if name is not None:
        error_cls = UNIQUE_CONSTRAINT_ERRORS.get(name)
        if error_cls is not None:
            return error_cls()
        return InvalidInput()

    message = str(exc.orig)
    for column, error_cls in SQLITE_UNIQUE_COLUMNS.items():
        if f"UNIQUE constraint failed: {column}" in message:
            return error_cls()
    if "CHECK constraint failed" in message:
        return InvalidInput()
    return exc


def _require(value: str, field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise InvalidInput(f"{field} must not be empty")
    return cleaned


def user_id_from_token(token: str) -> uuid.UUID:
    """
    Проверить bearer-токен без обращения к БД и вернуть user_id.
    """
    payload = decode_token(token)
    if payload is None or payload.get("token_type") != "access":
        raise InvalidCredentials("Could not validate credentials")

    try:
        return uuid.UUID(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise InvalidCredentials("Could not validate credentials") from None


class CredentialManager:
    """
    Регистрация, аутентификация и выдача/проверка bearer-токенов.

    Возвращаемые User отвязаны от сессии (expunge).
    """

    def __init__(self, db: Session, token_ttl: Optional[timedelta] = None):
        self.db = db
        self.token_ttl = token_ttl

    def register(self, username: str, email: str, password: str) -> User:
        """
        Зарегистрировать нового пользователя.

        username хранится как есть (после trim), email приводится к нижнему
        регистру: Alice@x.com и alice@x.com это один адрес.
        Уникальность username/email проверяет сама БД,
        нарушение превращается в DuplicateUsername / DuplicateEmail.
        """
        username = _require(username, "username")
        email = _require(email, "email").lower()
        if not password:
            raise InvalidInput("password must not be empty")

        db_user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
        )

        try:
            with atomic(self.db):
                self.db.add(db_user)
                self.db.flush()
                self.db.expunge(db_user)
        except IntegrityError as exc:
            error = duplicate_user_error(exc)
            if error is exc:
                raise
            logger.info("Registration rejected for %r: %s", username, error.code)
            raise error from None

        logger.info("User registered: id=%s username=%r", db_user.id, db_user.username)
        return db_user

    def authenticate(self, username: str, password: str) -> uuid.UUID:
        """
        Аутентифицировать пользователя по username и паролю.

        username нормализуется так же, как при регистрации (trim).
        Пароль проверяется всегда, даже если пользователя нет (сверяем с
        фиктивным хэшем), и отказ идет одной веткой: снаружи не видно,
        что именно не совпало.
        """
        username = (username or "").strip()
        with atomic(self.db):
            row = self.db.execute(
                select(User.id, User.password_hash).where(User.username == username)
            ).first()

        stored_hash = row.password_hash if row is not None else DUMMY_PASSWORD_HASH
        password_ok = verify_password(password or "", stored_hash)

        if row is None or not password_ok:
            logger.info("Failed login attempt")
            raise InvalidCredentials()

        logger.info("User logged in: id=%s", row.id)
        return row.id

    def issue_token(self, user_id: uuid.UUID) -> str:
        return create_access_token(
            data={"sub": str(user_id)},
            expires_delta=self.token_ttl,
        )

    def verify_token(self, token: str) -> uuid.UUID:
        return user_id_from_token(token)

    def get_user(self, user_id: uuid.UUID) -> User:
        with atomic(self.db):
            db_user = self.db.get(User, user_id, populate_existing=True)
            if db_user is not None:
                self.db.expunge(db_user)

        if db_user is None:
            raise NotFound("User not found")
        return db_user

    def delete_user(self, user_id: uuid.UUID) -> None:
        """
        Удалить аккаунт. Посты автора удаляются каскадом в БД.
        """
        with atomic(self.db):
            db_user = self.db.get(User, user_id, populate_existing=True)
            if db_user is not None:
                self.db.delete(db_user)

        if db_user is None:
            raise NotFound("User not found")
        logger.info("User deleted: id=%s", user_id)
