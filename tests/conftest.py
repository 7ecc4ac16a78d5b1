import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("PUBLIC_BASE_URL", None)

import pytest
from fastapi.testclient import TestClient

from tinylink import database, models
from tinylink.main import app


@pytest.fixture(autouse=True)
def fresh_tables():
    models.Base.metadata.drop_all(bind=database.engine)
    models.Base.metadata.create_all(bind=database.engine)
    yield


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db():
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_link(client):
    def _make(code="abc123", url="https://example.com", **extra):
        res = client.post("/api/links", json={"code": code, "originalUrl": url, **extra})
        assert res.status_code == 201, res.text
        return res.json()
    return _make
