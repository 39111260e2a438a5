"""
Tests for the HTTP surface: registration, metrics, health, error envelope.
"""

import re

import pytest
from fastapi.testclient import TestClient

from registrar.auth import PasswordHasher
from registrar.core import MetricsRegistry, RandomnessUnavailableError, RegistryRecorder
from registrar.core.metrics import GENERATE_HASH_DURATION, SAVE_USER_DURATION
from registrar.services import RegistrationService

from conftest import FAST_PARAMS, FailingStore, FakeStore, stored_users

ENCODED_RE = re.compile(
    r"^\$argon2id\$v=\d+\$m=\d+,t=\d+,p=\d+\$[A-Za-z0-9+/]+\$[A-Za-z0-9+/]+$"
)


@pytest.fixture
def app(db_url):
    from registrar.main import create_app

    return create_app()


@pytest.fixture
def client(app):
    """Client against the fully wired app and a migrated database."""
    app.state.metrics_registry = MetricsRegistry()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fake_store_client(app):
    """Client whose service writes to an in-memory store."""
    registry = MetricsRegistry()
    store = FakeStore()
    app.state.metrics_registry = registry
    app.state.registration_service = RegistrationService(
        hasher=PasswordHasher(FAST_PARAMS),
        store=store,
        recorder=RegistryRecorder(registry),
    )
    with TestClient(app) as test_client:
        yield test_client, store, registry


class TestCreateUser:
    """POST /users"""

    def test_register_success(self, client, db_session):
        response = client.post(
            "/users", json={"email": "a@example.com", "password": "correct horse"}
        )

        assert response.status_code == 201
        assert response.json() == {"status": "created", "message": "User created."}
        assert "X-Request-ID" in response.headers

        (user,) = stored_users(db_session)
        assert ENCODED_RE.match(user.password_hash)

    def test_duplicate_email_is_internal_error(self, client):
        body = {"email": "dup@example.com", "password": "correct horse"}
        assert client.post("/users", json=body).status_code == 201

        response = client.post("/users", json=body)

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "E1000"
        assert error["message"] == "Failed to create user"

    def test_persistence_called_once_per_request(self, fake_store_client):
        client, store, _ = fake_store_client

        client.post("/users", json={"email": "a@example.com", "password": "correct horse"})

        assert len(store.calls) == 1
        assert store.calls[0][0] == "a@example.com"
        assert ENCODED_RE.match(store.calls[0][1])

    def test_invalid_email_is_client_error(self, fake_store_client):
        client, store, _ = fake_store_client

        response = client.post("/users", json={"email": "nope", "password": "correct horse"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "E1001"
        assert error["details"] == {"field": "email"}
        assert store.calls == []

    def test_short_password_is_client_error(self, fake_store_client):
        client, _, _ = fake_store_client

        response = client.post("/users", json={"email": "a@example.com", "password": "short"})

        assert response.status_code == 400
        assert "short" not in response.text

    def test_missing_field_does_not_echo_input(self, fake_store_client):
        client, _, _ = fake_store_client

        response = client.post("/users", json={"password": "hunter2-secret"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "E1001"
        assert "hunter2-secret" not in response.text

    def test_entropy_failure_is_internal_error(self, fake_store_client, monkeypatch):
        client, store, _ = fake_store_client

        def broken(_length):
            raise RandomnessUnavailableError()

        monkeypatch.setattr("registrar.auth.password.generate_salt", broken)

        response = client.post(
            "/users", json={"email": "a@example.com", "password": "correct horse"}
        )

        assert response.status_code == 500
        assert response.json()["error"]["message"] == "Failed to create user"
        assert store.calls == []

    def test_store_failure_does_not_take_service_down(self, app):
        app.state.metrics_registry = MetricsRegistry()
        app.state.registration_service = RegistrationService(
            hasher=PasswordHasher(FAST_PARAMS),
            store=FailingStore(),
            recorder=RegistryRecorder(app.state.metrics_registry),
        )
        with TestClient(app) as client:
            body = {"email": "a@example.com", "password": "correct horse"}
            assert client.post("/users", json=body).status_code == 500
            assert client.post("/users", json=body).status_code == 500
            assert client.get("/healthz").status_code == 200

    def test_oversized_body_rejected(self, fake_store_client):
        client, store, _ = fake_store_client

        response = client.post(
            "/users",
            json={"email": "a@example.com", "password": "x" * 100_000},
        )

        assert response.status_code == 413
        assert response.json()["error"]["code"] == "E1004"
        assert store.calls == []


class TestMetricsEndpoint:
    """GET /metrics"""

    def test_snapshot_reflects_registrations(self, fake_store_client):
        client, _, _ = fake_store_client

        client.post("/users", json={"email": "a@example.com", "password": "correct horse"})
        client.post("/users", json={"email": "a@example.com", "password": "correct horse"})
        client.post("/users", json={"email": "bad", "password": "correct horse"})

        response = client.get("/metrics")

        assert response.status_code == 200
        histograms = response.json()["metrics"]["histograms"]
        assert histograms[GENERATE_HASH_DURATION]["count"] == 2
        assert histograms[SAVE_USER_DURATION]["count"] == 1
        assert "+Inf" in histograms[GENERATE_HASH_DURATION]["buckets"]


class TestHealth:
    """Liveness and readiness probes."""

    def test_healthz(self, client):
        response = client.get("/healthz")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health_alias(self, client):
        assert client.get("/health").status_code == 200

    def test_readyz(self, client):
        response = client.get("/readyz")
        assert response.status_code == 200
        assert response.json()["checks"]["database"] is True

    def test_request_id_propagated(self, client):
        response = client.get("/healthz", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    def test_unknown_route_uses_error_envelope(self, client):
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "E1002"


class ExplodingService:
    def register(self, request):
        raise RuntimeError("boom")


class TestUnexpectedErrors:
    """Errors outside the AppError hierarchy still carry the request id."""

    def test_unhandled_exception_keeps_request_id(self, app):
        import logging

        from registrar.core.logging import RequestIdFilter, StructuredFormatter

        records = []

        class Collect(logging.Handler):
            def emit(self, record):
                records.append(self.format(record))

        handler = Collect()
        handler.setFormatter(StructuredFormatter())
        handler.addFilter(RequestIdFilter())

        app.state.metrics_registry = MetricsRegistry()
        app.state.registration_service = ExplodingService()
        with TestClient(app, raise_server_exceptions=False) as client:
            # Startup replaces root handlers, so attach after it.
            middleware_logger = logging.getLogger("registrar.core.middleware")
            middleware_logger.addHandler(handler)
            try:
                response = client.post(
                    "/users",
                    json={"email": "a@example.com", "password": "correct horse"},
                    headers={"X-Request-ID": "req-500"},
                )
            finally:
                middleware_logger.removeHandler(handler)

        assert response.status_code == 500
        assert response.headers["X-Request-ID"] == "req-500"
        error = response.json()["error"]
        assert error["code"] == "E1000"
        assert error["request_id"] == "req-500"
        assert "boom" not in response.text

        unhandled = [r for r in records if "Unhandled exception" in r]
        assert len(unhandled) == 1
        assert '"request_id": "req-500"' in unhandled[0]
