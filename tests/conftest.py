# tests/conftest.py
import json
import os
import re
import tempfile
from urllib.parse import parse_qsl, urlsplit

# One throwaway database file for the whole session, set before the service is imported.
_fd, _DB_PATH = tempfile.mkstemp(suffix=".db")
os.close(_fd)
os.environ["STRIPE_FIELD_DATABASE_URL"] = f"sqlite:///{_DB_PATH}"

import pytest
import stripe
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from stripe_field import db as service_db
from stripe_field import settings
from stripe_field.main import app
from stripe_field.db import Base, get_db
from stripe_field.dependencies import get_client_factory
from stripe_field.lookup import LookupContext, RemoteLookup
from stripe_field.stripe_client import build_client

EDITOR_TOKEN = "editor-token"
ADMIN_TOKEN = "admin-token"
SECRET_KEY = "sk_test_4eC39HqLyjWDarjtT1zdp7dc"


# --- Fake Stripe HTTP API ---
class FakeStripe(stripe.HTTPClient):
    """
    Transport handed to the Stripe SDK in place of requests.
    Responses are canned per path (e.g. "customers/cus_1"); every call is recorded
    as (method, path, params) with `expand[0]`, `expand[1]`... folded into a list.
    Unknown paths answer 404 resource_missing, like Stripe does.
    """
    name = "fake"

    def __init__(self):
        super().__init__()
        self.headers = {}
        self.routes = {}
        self.calls = []
        self.clients_built = 0

    def add(self, path, payload, status=200):
        self.routes[path] = (status, payload)

    def fail(self, path, exc):
        self.routes[path] = (None, exc)

    def request(self, method, url, headers, post_data=None, **kwargs):
        parts = urlsplit(url)
        path = parts.path.split("/v1/", 1)[1]
        self.headers = dict(headers or {})
        self.calls.append((method.upper(), path, _params(parts.query)))
        if path not in self.routes:
            object_id = path.rsplit("/", 1)[-1]
            return json.dumps({"error": {"type": "invalid_request_error", "code": "resource_missing",
                                         "message": f"No such object: '{object_id}'"}}), 404, {}
        status, payload = self.routes[path]
        if isinstance(payload, Exception):
            raise payload
        body = "not json" if payload is None else json.dumps(payload)
        return body, status, {}

    def close(self):
        pass

    def paths(self):
        return [p for _, p, _ in self.calls]

    def client(self, api_key):
        self.clients_built += 1
        return build_client(api_key, http_client=self)


def _params(query):
    out = {}
    for key, value in parse_qsl(query):
        m = re.match(r"^(\w+)\[\d+\]$", key)
        if m:
            out.setdefault(m.group(1), []).append(value)
        else:
            out[key] = value
    return out


# --- Sample Stripe payloads ---
@pytest.fixture
def customer_payload():
    return {"id": "cus_123", "object": "customer", "name": "Ann Lee", "email": "ann@x.com",
            "balance": 0, "metadata": {}}


@pytest.fixture
def product_payload():
    return {
        "id": "prod_9",
        "object": "product",
        "name": "Pro",
        "description": "Pro tier",
        "active": True,
        "default_price": {"id": "price_1", "unit_amount": 1000, "currency": "usd",
                          "recurring": {"interval": "month"}},
    }


@pytest.fixture
def subscription_payload():
    return {
        "id": "sub_77",
        "object": "subscription",
        "status": "active",
        "customer": {"id": "cus_123", "object": "customer", "name": "Ann Lee", "email": "ann@x.com"},
        "items": {"data": [{"plan": {"id": "plan_basic", "nickname": None},
                            "price": {"id": "price_1", "nickname": None}}]},
    }


# --- Temporary SQLite DB file for the whole test session ---
@pytest.fixture(scope="session")
def tmp_db_url():
    yield f"sqlite:///{_DB_PATH}"
    service_db.engine.dispose()
    try:
        os.remove(_DB_PATH)
    except OSError:
        pass


@pytest.fixture(scope="session")
def engine(tmp_db_url):
    eng = create_engine(tmp_db_url, connect_args={"check_same_thread": False}, future=True)
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
    db = TestingSession()
    _clear_all(db)
    try:
        yield db
    finally:
        db.rollback()
        db.close()


def _clear_all(db):
    db.execute(text("DELETE FROM field_values"))
    db.execute(text("DELETE FROM options"))
    db.commit()


@pytest.fixture
def fake_stripe():
    return FakeStripe()


# --- Deterministic settings: known tokens, no key configured unless a test asks ---
@pytest.fixture(autouse=True)
def service_settings(monkeypatch):
    monkeypatch.setattr(settings, "EDITOR_TOKENS", {EDITOR_TOKEN})
    monkeypatch.setattr(settings, "ADMIN_TOKENS", {ADMIN_TOKEN})
    monkeypatch.setattr(settings, "NONCE_SECRET", "test-nonce-secret")
    monkeypatch.setattr(settings, "SECRET_KEY_CONSTANT", "")
    monkeypatch.setattr(settings, "RESOLVE_PLAN_LABELS", True)


@pytest.fixture
def connected(monkeypatch):
    monkeypatch.setattr(settings, "SECRET_KEY_CONSTANT", SECRET_KEY)


# --- Override FastAPI's DB and Stripe dependencies ---
@pytest.fixture(autouse=True)
def override_dependencies(db_session, fake_stripe):
    def _get_db():
        try:
            yield db_session
        finally:
            pass
    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_client_factory] = lambda: fake_stripe.client
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def editor_headers():
    return {"Authorization": f"Bearer {EDITOR_TOKEN}"}


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


# --- Lookup adapters wired to the fake transport ---
@pytest.fixture
def lookup(fake_stripe):
    return RemoteLookup(LookupContext(SECRET_KEY, fake_stripe.client))


@pytest.fixture
def offline_lookup(fake_stripe):
    return RemoteLookup(LookupContext("", fake_stripe.client))
