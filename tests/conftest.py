import os

# In-memory database for the whole test session; must be set before sellerfin is imported
os.environ["SQLALCHEMY_DATABASE_URI"] = "sqlite://"

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from sellerfin.core import Base, SessionLocal, engine
import sellerfin.models  # noqa: F401  registers every table
from main import app


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def client(db, user_id):
    """TestClient sending the gateway identity header"""
    return TestClient(app, headers={"X-User-Id": str(user_id)})
