import pytest
from fastapi.testclient import TestClient

from signtalk.backend.api import create_app
from signtalk.backend.core.config import Settings


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_dsn=f"sqlite+aiosqlite:///{tmp_path / 'signtalk.db'}",
        snapshot_path=tmp_path / "modelo-ia.json",
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client
