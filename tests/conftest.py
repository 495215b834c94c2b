from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from invoicedesk.core.clock import FixedClock
from invoicedesk.core.config import get_config
from invoicedesk.core.dependencies import get_db_session
from invoicedesk.database.db import build_engine, init_db
from invoicedesk.main import create_app
from invoicedesk.services.customer_service import CustomerService
from invoicedesk.services.user_service import UserService

TEST_SECRET = "test-secret-with-enough-entropy-0123456789"
TEST_PASSWORD = "correct-horse-battery"
NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'invoicedesk_test.db'}")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def config():
    return replace(get_config(), JWT_SECRET=TEST_SECRET, PASSWORD_HASH_ITERATIONS=1000, COMPANY_NAME="Acme Billing")


@pytest.fixture
def customer(session, clock):
    return CustomerService(session, clock=clock).create_customer(name="Globex Corp", email="billing@globex.test")


@pytest.fixture
def user(session, clock):
    service = UserService(session, clock=clock, hash_iterations=1000)
    return service.create_user(email="alice@example.com", name="Alice", password=TEST_PASSWORD)


@pytest.fixture
def app(config, clock, session_factory):
    application = create_app(config=config, clock=clock, run_bootstrap=False)

    def _override_db_session():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    application.dependency_overrides[get_db_session] = _override_db_session
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(app, user):
    token = app.state.tokens.issue(user)
    return {"Authorization": f"Bearer {token}"}
