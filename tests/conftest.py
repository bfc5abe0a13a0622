"""Shared fixtures: every test gets its own database and uploads directory."""

import pytest
from fastapi.testclient import TestClient

from recycle_points_api.app.core.config import settings
from recycle_points_api.app.core.db import get_connection, get_uploads_path, init_db
from recycle_points_api.app.main import app

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
BASE_URL = "http://testserver/uploads"


@pytest.fixture()
def app_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "points.db"))
    monkeypatch.setattr(settings, "uploads_dir", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "uploads_base_url", BASE_URL)
    init_db()
    return settings


@pytest.fixture()
def client(app_settings):
    with TestClient(app) as test_client:
        yield test_client


def point_form(**overrides):
    form = {
        "name": "Recicla Centro",
        "email": "a@x.com",
        "password": "s3cret-pass",
        "whatsapp": "62999998888",
        "latitude": "-16.3390798",
        "longitude": "-48.9303596",
        "city": "Anápolis",
        "uf": "GO",
        "items": "1,2,3",
    }
    form.update(overrides)
    return {key: value for key, value in form.items() if value is not None}


def image_file(name="ponto.png"):
    return {"image": (name, PNG_BYTES, "image/png")}


@pytest.fixture()
def register(client):
    """Create a point through the API and return the response."""

    def _register(with_image=True, **overrides):
        files = image_file() if with_image else None
        return client.post("/points", data=point_form(**overrides), files=files)

    return _register


def db_rows(sql, params=()):
    conn = get_connection()
    try:
        return [dict(row) for row in conn.execute(sql, params).fetchall()]
    finally:
        conn.close()


def stored_images():
    return sorted(path.name for path in get_uploads_path().iterdir())
