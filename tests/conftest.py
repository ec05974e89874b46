# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - Fresh in-memory SQLite schema per test (config.TestConfig)
# - No app context is held open between requests; DB checks use app_context()
# - admin / accountant accounts + one current month as opt-in fixtures
# ---------------------------------------------------------------------

from __future__ import annotations

import pytest

from canteen import create_app
from canteen.extensions import db
from canteen.models import ROLE_ACCOUNTANT, ROLE_ADMIN, Month, User

ADMIN_EMAIL = "admin@example.com"
ACCOUNTANT_EMAIL = "accountant@example.com"
PASSWORD = "secret123"


@pytest.fixture()
def app():
    app = create_app("config.TestConfig")
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


def _add_user(email: str, name: str, role: str, is_active: bool = True) -> int:
    user = User(email=email, name=name, role=role, is_active=is_active)
    user.set_password(PASSWORD)
    db.session.add(user)
    db.session.commit()
    return user.id


@pytest.fixture()
def users(app):
    """{"admin": id, "accountant": id}"""
    with app.app_context():
        return {
            "admin": _add_user(ADMIN_EMAIL, "المدير", ROLE_ADMIN),
            "accountant": _add_user(ACCOUNTANT_EMAIL, "المحاسب", ROLE_ACCOUNTANT),
        }


@pytest.fixture()
def month(app):
    """Id of the current month."""
    with app.app_context():
        m = Month(name="مارس 2026", is_current=True)
        db.session.add(m)
        db.session.commit()
        return m.id


def login(client, email: str, password: str = PASSWORD):
    return client.post("/auth/login", data={"email": email, "password": password})


@pytest.fixture()
def admin_client(app, users, month):
    c = app.test_client()
    login(c, ADMIN_EMAIL)
    return c


@pytest.fixture()
def accountant_client(app, users, month):
    c = app.test_client()
    login(c, ACCOUNTANT_EMAIL)
    return c
