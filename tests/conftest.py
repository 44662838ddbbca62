import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import stockroom.models  # noqa: F401
from stockroom.core.config import settings
from stockroom.core.deps import get_db
from stockroom.core.security import create_access_token
from stockroom.db.base import Base
from stockroom.db.session import enable_sqlite_foreign_keys
from stockroom.main import app
from stockroom.models.user import User


@pytest.fixture()
def test_context():
    original_secret = settings.secret_key
    settings.secret_key = "test-secret-key"

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", enable_sqlite_foreign_keys)
    session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = session_local()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client, session_local

    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)
    settings.secret_key = original_secret


@pytest.fixture()
def acting_user(test_context):
    _, session_local = test_context
    db = session_local()
    try:
        user = User(name="Admin User", email="admin@inventory.example")
        db.add(user)
        db.commit()
        db.refresh(user)
        return user.id
    finally:
        db.close()


@pytest.fixture()
def auth_headers(acting_user) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(acting_user)}"}
