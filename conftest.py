import os

# Must be set before db.db hands out a client
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("CLIENT_ORIGIN_URL", "*")

import pytest

from db.db import get_db, reset_db


@pytest.fixture(autouse=True)
def db():
    """Fresh MockFirestore for every test"""
    reset_db()
    yield get_db()
    reset_db()


@pytest.fixture
def app():
    from api import create_app
    app = create_app()
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
