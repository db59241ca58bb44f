# blog_service/models.py

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow() -> datetime:
    """
    Текущее время в UTC без tzinfo.

    Храним "наивный" UTC, чтобы PostgreSQL и SQLite вели себя одинаково.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    """
    Модель пользователя
    """
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("username", name="uq_users_username"),
        UniqueConstraint("email", name="uq_users_email"),
        CheckConstraint("trim(username) <> ''", name="ck_users_username_not_blank"),
        CheckConstraint("trim(email) <> ''", name="ck_users_email_not_blank"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # Посты удаляются вместе с автором (ON DELETE CASCADE на стороне БД)
    posts = relationship(
        "Post",
        back_populates="author",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        # password_hash в repr не попадает
        return f"<User id={self.id} username={self.username!r}>"


class Post(Base):
    """
    Модель публикаций
    """

    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint("trim(title) <> ''", name="ck_posts_title_not_blank"),
        CheckConstraint("trim(content) <> ''", name="ck_posts_content_not_blank"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    author_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE", name="fk_posts_author_id_users"),
        nullable=False,
    )
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    # updated_at двигает только PostStore, см. services/post_services.py
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    author = relationship("User", back_populates="posts")


# Индексы под выборки: по автору, по свежести, по автору + свежести
Index("ix_posts_author_id", Post.author_id)
Index("ix_posts_created_at", Post.created_at.desc())
Index("ix_posts_author_id_created_at", Post.author_id, Post.created_at.desc())
