from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.core.config import get_settings
from app.db import database

ADMIN_IDS = [900, 901]


@pytest.fixture(autouse=True)
def db_engine(monkeypatch):
    monkeypatch.setenv("ADMIN_USER_IDS", "[900, 901]")
    get_settings.cache_clear()
    engine = database.init_engine("sqlite://")
    yield engine
    get_settings.cache_clear()


@pytest.fixture()
def session(db_engine):
    s = database.get_session()
    yield s
    s.close()


@pytest.fixture()
def client(db_engine):
    from app.main import app

    return TestClient(app)
