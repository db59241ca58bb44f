"""
API endpoints для публикаций
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from blog_service.config import settings
from blog_service.dependencies import get_current_user_id, get_post_store
from blog_service.schemas import PostCreate, PostResponse, PostUpdate
from blog_service.services.post_services import PostStore

router = APIRouter(prefix=f"{settings.API_PREFIX}/v1/posts", tags=["posts"])


# =========================
# СОЗДАНИЕ НОВОЙ ПУБЛИКАЦИИ
# =========================

@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    post: PostCreate,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    store: PostStore = Depends(get_post_store),
):
    """
    Создание публикации с привязкой к текущему пользователю.
    """
    return store.create(current_user_id, post.title, post.content)


# ==========================
# ПОЛУЧИТЬ СПИСОК ПУБЛИКАЦИЙ
# ==========================

@router.get("", response_model=list[PostResponse])
def list_posts(
    author_id: Optional[uuid.UUID] = None,
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    store: PostStore = Depends(get_post_store),
):
    """
    Получаем список постов, новые сверху.

    Не требует авторизации. С author_id только посты этого автора.
    """
    return store.list(author_id=author_id, skip=skip, limit=limit)


# ===================
# ПОЛУЧИТЬ ПУБЛИКАЦИЮ
# ===================

@router.get("/{post_id}", response_model=PostResponse)
def get_post(
    post_id: uuid.UUID,
    store: PostStore = Depends(get_post_store),
):
    """
    Не требует авторизации.
    """
    return store.get(post_id)


# =====================================
# ОБНОВЛЕНИЕ(РЕДАКТИРОВАНИЕ) ПУБЛИКАЦИИ
# =====================================

@router.put("/{post_id}", response_model=PostResponse)
def update_post(
    post_id: uuid.UUID,
    post_update: PostUpdate,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    store: PostStore = Depends(get_post_store),
):
    """
    Обновление (редактирование) поста. Только автор.
    """
    return store.update(
        current_user_id,
        post_id,
        title=post_update.title,
        content=post_update.content,
    )


# ==================
# УДАЛИТЬ ПУБЛИКАЦИЮ
# ==================

@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(
    post_id: uuid.UUID,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    store: PostStore = Depends(get_post_store),
):
    """
    Удаление поста. Только автор.
    """
    store.delete(current_user_id, post_id)
    return None
