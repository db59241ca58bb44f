# blog_service/schemas/__init__.py

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr

# =======================
# СХЕМЫ ДЛЯ ПОЛЬЗОВАТЕЛЕЙ
# =======================

class UserBase(BaseModel):
    """
    Базовая схема пользователя
    """
    email: EmailStr
    username: str


class UserCreate(UserBase):
    """
    Схема для создания пользователя (регистрация)
    """
    password: str


class UserLogin(BaseModel):
    """
    Схема для логина по username
    """
    username: str
    password: str


class UserResponse(BaseModel):
    """
    Схема ответа с инфо о пользователе
    """
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    email: str
    created_at: datetime


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


# ====================
# СХЕМЫ ДЛЯ ПУБЛИКАЦИИ
# ====================


class PostBase(BaseModel):
    """Базовая информация о посте"""
    title: str
    content: str


class PostCreate(PostBase):
    """Создание поста"""
    pass


class PostUpdate(BaseModel):
    """Обновление поста"""
    title: Optional[str] = None
    content: Optional[str] = None


class PostResponse(PostBase):
    """Ответ с информацией о посте"""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    author_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
