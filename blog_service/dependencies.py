# blog_service/dependencies.py

"""
Зависимости для использования в endpoints
"""

import uuid
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from blog_service.services.auth_service import CredentialManager, user_id_from_token
from blog_service.services.post_services import PostStore
from blog_service.utils.database import get_db
from blog_service.utils.exceptions import InvalidCredentials

security = HTTPBearer(auto_error=False)


def get_credential_manager(db: Session = Depends(get_db)) -> CredentialManager:
    return CredentialManager(db)


def get_post_store(db: Session = Depends(get_db)) -> PostStore:
    return PostStore(db)


def get_current_user_id(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> uuid.UUID:
    """
    Получаем id текущего авторизованного пользователя

    Извлекаем Bearer токен из заголовка Authorization и проверяем его.
    Сессию БД не открываем: токен подписан и содержит user_id и срок действия.
    """
    if credentials is None:
        raise InvalidCredentials("Not authenticated")

    return user_id_from_token(credentials.credentials)
