import os
import tempfile

# Settings are read at import time, so the environment must be prepared
# before anything from app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="socialfeed-images-")
os.environ["ENABLE_IMAGE_CLEANUP"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.main import app
from app.storage.local_storage import storage

# One in-memory database shared by every connection in the pool
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=test_engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db_session):
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def clean_upload_dir():
    yield
    for path in storage.list_files():
        path.unlink()


def sign_up(client, username="ana", password="x", **extra):
    payload = {"username": username, "password": password, **extra}
    return client.post("/api/auth/sign-up", json=payload)


def auth_headers(token):
    return {"X-Access-Token": token}


@pytest.fixture
def ana(client):
    """Signed-up user 'ana' as (user, headers)"""
    body = sign_up(client, "ana", "x").json()
    return body["user"], auth_headers(body["token"])


@pytest.fixture
def ben(client):
    """Signed-up user 'ben' as (user, headers)"""
    body = sign_up(client, "ben", "secret").json()
    return body["user"], auth_headers(body["token"])
