import os

import pytest

os.environ.setdefault("PYTEST_RUNNING", "1")

from fastapi.testclient import TestClient

import nonprofitsuite.db.database as db_module
from nonprofitsuite.api.main import app
from nonprofitsuite.db import models
from nonprofitsuite.db.repositories import users as users_repo
from nonprofitsuite.services import metrics_service
from nonprofitsuite.utils import cache
from nonprofitsuite.utils.capabilities import (
    ROLE_ADMINISTRATOR,
    ROLE_AUTHOR,
    ROLE_CAPABILITIES,
    ROLE_EDITOR,
    ROLE_SUBSCRIBER,
)
from nonprofitsuite.utils.license import refresh_license_cache

ADMIN_EMAIL = "admin@example.org"


def _ctx(user):
    return {
        "id": user.id,
        "email": user.email,
        "display_name": user.display_name,
        "role": user.role,
        "capabilities": ROLE_CAPABILITIES[user.role],
    }


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Each test starts as a proxy-authenticated, PRO-licensed installation."""
    monkeypatch.delenv("DEV_MODE", raising=False)
    monkeypatch.delenv("NONPROFITSUITE_LICENSE_KEY", raising=False)
    monkeypatch.setenv("NONPROFITSUITE_DEV_MODE", "true")
    monkeypatch.setenv("ADMIN_EMAILS", ADMIN_EMAIL)
    refresh_license_cache()
    metrics_service.refresh_metrics_cache()
    yield
    refresh_license_cache()
    metrics_service.refresh_metrics_cache()


@pytest.fixture
def free_tier(monkeypatch):
    """No PRO license and no license server to ask."""
    monkeypatch.setenv("NONPROFITSUITE_DEV_MODE", "false")
    refresh_license_cache()
    yield


@pytest.fixture(autouse=True)
def db_session():
    models.Base.metadata.create_all(bind=db_module.engine)
    cache.get_cache().object_store.clear()
    session = db_module.SessionLocal()
    try:
        yield session
    finally:
        session.close()
        models.Base.metadata.drop_all(bind=db_module.engine)
        cache.get_cache().object_store.clear()


@pytest.fixture
def db(db_session):
    return db_session


def _make_user(db, email, role):
    user = users_repo.create_user(db, email=email, display_name=email.split("@")[0], role=role)
    db.commit()
    return user


@pytest.fixture
def admin_user(db):
    return _make_user(db, ADMIN_EMAIL, ROLE_ADMINISTRATOR)


@pytest.fixture
def admin_ctx(admin_user):
    return _ctx(admin_user)


@pytest.fixture
def editor_ctx(db):
    return _ctx(_make_user(db, "editor@example.org", ROLE_EDITOR))


@pytest.fixture
def author_ctx(db):
    return _ctx(_make_user(db, "author@example.org", ROLE_AUTHOR))


@pytest.fixture
def subscriber_ctx(db):
    return _ctx(_make_user(db, "reader@example.org", ROLE_SUBSCRIBER))


@pytest.fixture
def client(db_session):
    def _override_get_db():
        yield db_session

    app.dependency_overrides[db_module.get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(db_module.get_db, None)


@pytest.fixture
def admin_headers():
    return {"x-auth-request-email": ADMIN_EMAIL, "x-auth-request-user": "Admin"}


@pytest.fixture
def reader_headers():
    return {"x-auth-request-email": "someone@example.org", "x-auth-request-user": "Someone"}
