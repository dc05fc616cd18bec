from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from taskbook.database import create_tables, make_session_factory
from taskbook.dependencies import get_document_store, get_identity_provider
from taskbook.gateways.identity import IdentityGateway
from taskbook.gateways.tasks import TaskGateway
from taskbook.main import app
from taskbook.providers.documents import SqlDocumentStore
from taskbook.providers.identity import LocalIdentityProvider

PASSWORD = "secret1"


@pytest.fixture()
def engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture()
def store(session_factory):
    return SqlDocumentStore(session_factory)


@pytest.fixture()
def provider(session_factory):
    return LocalIdentityProvider(
        session_factory,
        secret_key="test-secret",
        token_ttl=timedelta(minutes=5),
        min_password_length=6,
    )


@pytest.fixture()
def identity(provider, store):
    return IdentityGateway(provider, store)


@pytest.fixture()
def tasks(store):
    return TaskGateway(store)


@pytest.fixture()
def sign_up(identity):
    """Register and log in a user, returning (principal, token)."""

    def _sign_up(name: str, email: str, password: str = PASSWORD):
        identity.register(name, email, password)
        result = identity.login(email, password)
        return identity.current_user(result.access_token), result.access_token

    return _sign_up


@pytest.fixture()
def alice(sign_up):
    principal, _ = sign_up("Alice", "alice@example.com")
    return principal


@pytest.fixture()
def bob(sign_up):
    principal, _ = sign_up("Bob", "bob@example.com")
    return principal


@pytest.fixture()
def client(provider, store):
    app.dependency_overrides[get_identity_provider] = lambda: provider
    app.dependency_overrides[get_document_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
