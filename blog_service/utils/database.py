import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from blog_service.config import settings
from blog_service.utils.exceptions import StoreUnavailable

logger = logging.getLogger(__name__)


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """
    SQLite по умолчанию не проверяет внешние ключи,
    без этого не работает ON DELETE CASCADE.
    """
    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, _):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str, **kwargs) -> Engine:
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_pre_ping", True)

    engine = create_engine(url, future=True, **kwargs)
    if engine.dialect.name == "sqlite":
        enable_sqlite_foreign_keys(engine)
    return engine


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Одна операция = одна транзакция.

    commit при успехе, rollback при любой ошибке.
    Потеря соединения с БД превращается в StoreUnavailable,
    остальные ошибки (в т.ч. IntegrityError) пробрасываются как есть.
    """
    try:
        yield db
        db.commit()
    except (OperationalError, InterfaceError, DisconnectionError) as exc:
        db.rollback()
        logger.error("Database unavailable: %s", type(exc).__name__)
        raise StoreUnavailable() from exc
    except Exception:
        db.rollback()
        raise
