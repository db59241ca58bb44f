# blog_service/services/post_services.py

"""
Сервисный слой для постов.

Знает про модели и БД, но не про HTTP-статусы.
Автор приходит уже аутентифицированным (user_id), пароли сюда не попадают.

Наружу отдаём посты, отвязанные от сессии (expunge): rollback в
следующей операции их не "протухает".
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blog_service.models import Post, User, utcnow
from blog_service.utils.database import atomic
from blog_service.utils.exceptions import (
    AuthorNotFound,
    Forbidden,
    InvalidInput,
    NotFound,
)

logger = logging.getLogger(__name__)

ONE_TICK = timedelta(microseconds=1)


def _clean(value: str, field: str) -> str:
    if value is None or not value.strip():
        raise InvalidInput(f"{field} must not be empty")
    return value


def _check_owner(post: Optional[Post], author_id: uuid.UUID) -> None:
    if post is None:
        raise NotFound("Post not found")
    if post.author_id != author_id:
        raise Forbidden("Not enough permissions")


class PostStore:
    """
    CRUD постов с проверкой владельца.

    Политика для update/delete: сначала проверяем существование (NotFound),
    потом владельца (Forbidden).
    """

    def __init__(self, db: Session):
        self.db = db

    def _fetch(self, post_id: uuid.UUID) -> Optional[Post]:
        return self.db.get(Post, post_id, populate_existing=True)

    def _detach(self, *objects) -> None:
        for obj in objects:
            if obj is not None and obj in self.db:
                self.db.expunge(obj)

    def _next_updated_at(self, previous: datetime):
        """
        Новое значение updated_at, строго больше предыдущего.

        На PostgreSQL считаем от текущей версии строки внутри самого UPDATE:
        при гонке двух обновлений штамп не откатится назад.
        SQLite сериализует запись на уровне всей БД, там хватает значения из Python.
        """
        now = utcnow()
        if now <= previous:
            now = previous + ONE_TICK

        if self.db.get_bind().dialect.name == "postgresql":
            return func.greatest(Post.updated_at + ONE_TICK, now)
        return now

    def create(self, author_id: uuid.UUID, title: str, content: str) -> Post:
        """
        Создать пост от имени автора.
        """
        title = _clean(title, "title")
        content = _clean(content, "content")

        now = utcnow()
        db_post = Post(
            author_id=author_id,
            title=title,
            content=content,
            created_at=now,
            updated_at=now,
        )

        try:
            with atomic(self.db):
                author_exists = self.db.get(User, author_id) is not None
                if author_exists:
                    self.db.add(db_post)
                    self.db.flush()
                    self._detach(db_post)
        except IntegrityError as exc:
            # Автор удален между проверкой и вставкой
            if _is_fk_violation(exc):
                raise AuthorNotFound() from None
            raise

        if not author_exists:
            raise AuthorNotFound()

        logger.info("Post created: id=%s author_id=%s", db_post.id, author_id)
        return db_post

    def get(self, post_id: uuid.UUID) -> Post:
        with atomic(self.db):
            db_post = self._fetch(post_id)
            self._detach(db_post)

        if db_post is None:
            raise NotFound("Post not found")
        return db_post

    def update(
        self,
        author_id: uuid.UUID,
        post_id: uuid.UUID,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Post:
        """
        Обновить пост:
        - None в поле -> поле не меняется;
        - updated_at всегда сдвигается в том же UPDATE;
        - запись условная (id + author_id), если пост удалили
          параллельно, получаем NotFound, а не падение.
        """
        values = {}
        if title is not None:
            values["title"] = _clean(title, "title")
        if content is not None:
            values["content"] = _clean(content, "content")

        db_post = None
        with atomic(self.db):
            current = self._fetch(post_id)
            if current is not None and current.author_id == author_id:
                values["updated_at"] = self._next_updated_at(current.updated_at)
                db_post = self.db.scalars(
                    update(Post)
                    .where(Post.id == post_id, Post.author_id == author_id)
                    .values(**values)
                    .returning(Post)
                    .execution_options(populate_existing=True)
                ).first()
            self._detach(current, db_post)

        _check_owner(current, author_id)
        if db_post is None:
            raise NotFound("Post not found")

        logger.info("Post updated: id=%s", post_id)
        return db_post

    def delete(self, author_id: uuid.UUID, post_id: uuid.UUID) -> None:
        """
        Удалить пост. Чужой или несуществующий пост молча не удаляется.
        """
        deleted = 0
        with atomic(self.db):
            current = self._fetch(post_id)
            if current is not None and current.author_id == author_id:
                result = self.db.execute(
                    delete(Post)
                    .where(Post.id == post_id, Post.author_id == author_id)
                    .execution_options(synchronize_session=False)
                )
                deleted = result.rowcount
            self._detach(current)

        _check_owner(current, author_id)
        if deleted == 0:
            raise NotFound("Post not found")

        logger.info("Post deleted: id=%s", post_id)

    def list(
        self,
        author_id: Optional[uuid.UUID] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[Post]:
        """
        Посты от новых к старым, при author_id только посты автора.
        Пустой результат это пустой список, а не ошибка.
        """
        query = select(Post)
        if author_id is not None:
            query = query.where(Post.author_id == author_id)

        # Сортировка по дате создания, id как стабильный tie-break
        query = query.order_by(Post.created_at.desc(), Post.id.desc())

        # Пагинация
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)

        with atomic(self.db):
            posts = list(self.db.scalars(query).all())
            self._detach(*posts)
        return posts


def _is_fk_violation(exc: IntegrityError) -> bool:
    diag = getattr(exc.orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name is not None:
        return name == "fk_posts_author_id_users"
    # SQLite имени ограничения не сообщает
    return "FOREIGN KEY constraint failed" in str(exc.orig)
