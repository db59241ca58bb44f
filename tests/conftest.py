import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from blog_service.models import Base
from blog_service.services.auth_service import CredentialManager
from blog_service.services.post_services import PostStore
from blog_service.utils.database import enable_sqlite_foreign_keys, get_db
from blog_service.main import app

from fastapi.testclient import TestClient


@pytest.fixture
def db_engine():
    # StaticPool: одна и та же in-memory БД на все соединения
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def credentials(db_session):
    return CredentialManager(db_session)


@pytest.fixture
def store(db_session):
    return PostStore(db_session)


@pytest.fixture
def alice(credentials):
    return credentials.register("alice", "alice@mail.com", "pw123")


@pytest.fixture
def bob(credentials):
    return credentials.register("bob", "bob@mail.com", "pw456")


@pytest.fixture
def client(session_factory):
    def _override():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


def register_and_login(client, username, password="secret123"):
    resp = client.post(
        "/api/v1/auth/register",
        json={
            "username": username,
            "email": f"{username}@mail.com",
            "password": password,
        },
    )
    assert resp.status_code == 201, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register_and_login(client, "alice")
