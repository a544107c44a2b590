from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.main import create_app
from storefront.store import CatalogStore

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "password"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **delta) -> None:
        self.now = self.now + timedelta(**delta)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 1, 9, 30, 0))


@pytest.fixture()
def store(clock: FakeClock) -> CatalogStore:
    return CatalogStore(clock=clock, admin_username=ADMIN_USERNAME, admin_password=ADMIN_PASSWORD)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        environment="test",
        debug=False,
        configure_logging=False,
        image_dir=str(tmp_path / "generated_images"),
        submission_delay_seconds=0,
        admin_username=ADMIN_USERNAME,
        admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture()
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture()
def client(app: FastAPI):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def admin_client(app: FastAPI):
    with TestClient(app) as test_client:
        response = test_client.post(
            "/api/auth/login",
            json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
        )
        assert response.status_code == 200
        yield test_client


def new_product_payload(**overrides) -> dict:
    payload = {
        "name": "Poly-Cotton Shirting",
        "description": "Breathable shirting for everyday staff uniforms.",
        "price": 300,
        "category": "Staff Uniforms",
    }
    payload.update(overrides)
    return payload
