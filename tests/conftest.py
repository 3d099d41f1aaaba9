from __future__ import annotations

import pytest

from swarmboard import store
from swarmboard.app import create_app
from swarmboard.config import Settings
from swarmboard.models import db


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_path=str(tmp_path / "data" / "test.db"),
        static_dir=str(tmp_path / "dist"),
        api_gateway_url="https://api.example.test/prod",
    )


@pytest.fixture
def app(settings: Settings):
    app = create_app(settings)
    app.config["TESTING"] = True
    yield app
    store.close_store(app)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def broken_store(app):
    """Drop every table so the next store call fails."""
    with app.app_context():
        db.drop_all()
    return app


@pytest.fixture
def make_app():
    """Build extra apps from custom settings and close their stores afterwards."""
    built = []

    def build(settings: Settings):
        app = create_app(settings)
        app.config["TESTING"] = True
        built.append(app)
        return app

    yield build
    for app in built:
        store.close_store(app)
