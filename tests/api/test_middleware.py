"""Tests for API middleware and error mapping."""

from fastapi.testclient import TestClient
from starlette.requests import Request

from catalog_api.api.middleware import resolve_client_ip
from catalog_api.infrastructure.config import Settings
from catalog_api.main import create_app
from tests.fakes import FailingProductRepository, SlowProductRepository


def make_request(headers: dict[str, str] | None = None, client=("10.0.0.9", 5000)) -> Request:
    """Build a bare request from an ASGI scope."""
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/",
            "headers": [
                (key.lower().encode(), value.encode())
                for key, value in (headers or {}).items()
            ],
            "client": client,
        }
    )


class TestRequestIdMiddleware:
    """Tests for request ID correlation middleware."""

    def test_generates_request_id_if_not_provided(self, client: TestClient) -> None:
        """Should generate request ID if not in request headers."""
        response = client.get("/health")
        assert response.status_code == 200
        assert "X-Request-ID" in response.headers
        # UUID format
        assert len(response.headers["X-Request-ID"]) == 36

    def test_uses_provided_request_id(self, client: TestClient) -> None:
        """Should use request ID from request headers."""
        custom_id = "custom-request-id-12345"
        response = client.get("/products", headers={"X-Request-ID": custom_id})
        assert response.headers["X-Request-ID"] == custom_id

    def test_error_body_carries_request_id(self, client: TestClient) -> None:
        response = client.get("/products/missing", headers={"X-Request-ID": "req-42"})

        assert response.status_code == 404
        assert response.json()["request_id"] == "req-42"


class TestClientIpResolution:
    """Tests for resolve_client_ip."""

    def test_prefers_first_forwarded_hop(self) -> None:
        request = make_request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
        assert resolve_client_ip(request) == "203.0.113.7"

    def test_falls_back_to_real_ip(self) -> None:
        request = make_request({"X-Real-IP": "198.51.100.4"})
        assert resolve_client_ip(request) == "198.51.100.4"

    def test_falls_back_to_peer(self) -> None:
        assert resolve_client_ip(make_request()) == "10.0.0.9"

    def test_no_client(self) -> None:
        assert resolve_client_ip(make_request(client=None)) is None


class TestErrorHandling:
    """Tests for error translation to status codes."""

    def test_repository_error_is_generic_500(self, test_settings: Settings) -> None:
        """Storage faults return 500 without leaking the detail."""
        app = create_app(repository=FailingProductRepository(), app_settings=test_settings)

        with TestClient(app) as client:
            response = client.get("/products")

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "INTERNAL_ERROR"
        assert data["message"] == "internal error"
        assert "db:5432" not in response.text

    def test_unexpected_exception_is_recovered(self, test_settings: Settings) -> None:
        """An unhandled exception becomes a 500 response instead of crashing."""
        repository = FailingProductRepository(error=RuntimeError("boom"))
        app = create_app(repository=repository, app_settings=test_settings)

        with TestClient(app) as client:
            response = client.get("/products/anything")

        assert response.status_code == 500
        assert response.json()["error_code"] == "INTERNAL_ERROR"
        assert "boom" not in response.text

    def test_recovered_error_keeps_request_id(self, test_settings: Settings) -> None:
        repository = FailingProductRepository(error=RuntimeError("boom"))
        app = create_app(repository=repository, app_settings=test_settings)

        with TestClient(app) as client:
            response = client.get("/products", headers={"X-Request-ID": "req-500"})

        assert response.status_code == 500
        assert response.headers["X-Request-ID"] == "req-500"
        assert response.json()["request_id"] == "req-500"

    def test_unknown_route(self, client: TestClient) -> None:
        response = client.get("/nope")

        assert response.status_code == 404
        assert response.json()["error_code"] == "ERROR"


class TestTimeoutMiddleware:
    """Tests for the request timeout ceiling."""

    def test_slow_request_times_out(self) -> None:
        settings = Settings(request_timeout_seconds=0.05, log_format="console")
        app = create_app(
            repository=SlowProductRepository(delay_seconds=0.5),
            app_settings=settings,
        )

        with TestClient(app) as client:
            response = client.get("/products")

        assert response.status_code == 504
        assert response.json()["error_code"] == "REQUEST_TIMEOUT"

    def test_fast_request_unaffected(self) -> None:
        settings = Settings(request_timeout_seconds=5, log_format="console")
        app = create_app(
            repository=SlowProductRepository(delay_seconds=0.01),
            app_settings=settings,
        )

        with TestClient(app) as client:
            response = client.get("/products")

        assert response.status_code == 200
