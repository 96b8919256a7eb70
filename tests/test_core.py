"""Tests for core module."""

from __future__ import annotations

import base64
import json

import httpx
import pytest


class TestSettings:
    """Tests for Settings configuration."""

    def test_default_settings(self):
        """Test default settings creation."""
        from mlflow_rest.core.config import Settings

        settings = Settings()

        assert settings.tracking.uri == "http://localhost:5000"
        assert settings.tracking.api_version == "2.0"
        assert settings.tracking.timeout == 30.0
        assert settings.logging.level == "WARNING"

    def test_settings_from_env(self, monkeypatch):
        """Test environment fallbacks."""
        from mlflow_rest.core.config import TrackingConfig

        monkeypatch.setenv("MLFLOW_TRACKING_URI", "https://mlflow.example.com")
        monkeypatch.setenv("MLFLOW_TRACKING_USERNAME", "alice")
        monkeypatch.setenv("MLFLOW_TRACKING_PASSWORD", "secret")

        config = TrackingConfig()

        assert config.uri == "https://mlflow.example.com"
        assert config.username == "alice"
        assert config.password == "secret"

    def test_explicit_values_win_over_env(self, monkeypatch):
        """Test explicit values are kept."""
        from mlflow_rest.core.config import TrackingConfig

        monkeypatch.setenv("MLFLOW_TRACKING_URI", "https://env.example.com")

        config = TrackingConfig(uri="http://explicit:5000")

        assert config.uri == "http://explicit:5000"

    def test_settings_from_dict(self):
        """Test settings from dictionary."""
        from mlflow_rest.core.config import Settings

        data = {
            "tracking": {"uri": "http://tracking:8080", "api_version": 2.0},
            "logging": {"level": "debug"},
        }

        settings = Settings._from_dict(data)

        assert settings.tracking.uri == "http://tracking:8080"
        assert settings.tracking.api_version == "2.0"
        assert settings.logging.level == "DEBUG"

    def test_settings_from_yaml(self, temp_dir):
        """Test loading settings from a YAML file."""
        from mlflow_rest.core.config import Settings

        path = temp_dir / "settings.yaml"
        path.write_text("tracking:\n  uri: http://yaml-host:5000\n  timeout: 5\n")

        settings = Settings.from_yaml(path)

        assert settings.tracking.uri == "http://yaml-host:5000"
        assert settings.tracking.timeout == 5

    def test_numeric_credentials_from_yaml(self, temp_dir, server):
        """Test numeric YAML credentials are read as strings."""
        from mlflow_rest.core.client import MLFlow
        from mlflow_rest.core.config import Settings

        path = temp_dir / "settings.yaml"
        path.write_text(
            "tracking:\n  uri: http://mlflow.test\n  username: alice\n"
            "  password: 123456\n  token: 42\n"
        )

        settings = Settings.from_yaml(path)

        assert settings.tracking.password == "123456"
        assert settings.tracking.token == "42"

        server.add("GET", "users/get", json={})
        with MLFlow(config=settings.tracking, transport=httpx.MockTransport(server)) as mlf:
            mlf.get("users/get", username="alice")

        expected = base64.b64encode(b"alice:123456").decode()
        assert server.last.headers["authorization"] == f"Basic {expected}"

    def test_settings_from_missing_yaml(self, temp_dir):
        """Test a missing file gives defaults."""
        from mlflow_rest.core.config import Settings

        settings = Settings.from_yaml(temp_dir / "missing.yaml")

        assert settings.tracking.uri == "http://localhost:5000"

    def test_settings_to_dict(self):
        """Test settings to dictionary conversion."""
        from mlflow_rest.core.config import Settings

        data = Settings().to_dict()

        assert "tracking" in data
        assert "logging" in data
        assert data["tracking"]["verify_ssl"] is True

    def test_reload_settings(self, temp_dir):
        """Test reloading the global settings."""
        from mlflow_rest.core.config import get_settings, reload_settings

        path = temp_dir / "settings.yaml"
        path.write_text("tracking:\n  uri: http://reloaded:5000\n")

        first = get_settings()
        reloaded = reload_settings(path)

        assert reloaded is not first
        assert get_settings().tracking.uri == "http://reloaded:5000"


class TestClient:
    """Tests for the MLFlow connection object."""

    def test_uri_building(self, mlf):
        """Test endpoint URL construction."""
        assert mlf.api_root == "http://mlflow.test:5000/api"
        assert mlf.uri("experiments/get") == "http://mlflow.test:5000/api/2.0/mlflow/experiments/get"

    def test_uri_with_api_suffix(self):
        """Test a URI that already points at the API root."""
        from mlflow_rest.core.client import MLFlow

        with MLFlow("http://localhost:5000/api/") as mlf:
            assert mlf.api_root == "http://localhost:5000/api"
            assert mlf.uri("/runs/get").endswith("/api/2.0/mlflow/runs/get")

    def test_uri_from_settings(self, monkeypatch):
        """Test the URI falls back to the environment."""
        from mlflow_rest.core.client import MLFlow

        monkeypatch.setenv("MLFLOW_TRACKING_URI", "http://from-env:5000")

        with MLFlow() as mlf:
            assert mlf.api_root == "http://from-env:5000/api"

    def test_custom_api_version(self, server):
        """Test a non-default API version."""
        from mlflow_rest.core.client import MLFlow
        from mlflow_rest.core.config import TrackingConfig

        config = TrackingConfig(uri="http://mlflow.test", api_version="2.1")
        with MLFlow(config=config, transport=httpx.MockTransport(server)) as mlf:
            assert mlf.uri("runs/get") == "http://mlflow.test/api/2.1/mlflow/runs/get"

    def test_get_encodes_query(self, mlf, server):
        """Test query parameter encoding."""
        from mlflow_rest.entities import ViewType

        server.add("GET", "experiments/search", json={"experiments": []})

        mlf.get(
            "experiments/search",
            filter="",
            view_type=ViewType.ALL,
            order_by=["name", "creation_time DESC"],
            page_token=None,
            flag=True,
        )

        params = server.last.url.params
        assert params["view_type"] == "ALL"
        assert params.get_list("order_by") == ["name", "creation_time DESC"]
        assert params["flag"] == "true"
        assert "page_token" not in params

    def test_post_drops_none(self, mlf, server):
        """Test JSON body encoding."""
        from mlflow_rest.entities import Tag

        server.add("POST", "runs/create", json={"run": {}})

        mlf.post("runs/create", experiment_id="1", run_name=None, tags=[Tag("a", "b")])

        body = server.last_json()
        assert body == {"experiment_id": "1", "tags": [{"key": "a", "value": "b"}]}
        assert server.last.headers["content-type"] == "application/json"

    def test_empty_response(self, mlf, server):
        """Test empty bodies decode to an empty dict."""
        server.add(
            "POST",
            "experiments/delete",
            handler=lambda request: httpx.Response(200, content=b""),
        )

        assert mlf.post("experiments/delete", experiment_id="1") == {}

    def test_basic_auth(self, server):
        """Test credentials are passed as basic auth."""
        from mlflow_rest.core.client import MLFlow
        from mlflow_rest.core.config import TrackingConfig

        server.add("GET", "users/get", json={})
        config = TrackingConfig(uri="http://mlflow.test", username="alice", password="secret")

        with MLFlow(config=config, transport=httpx.MockTransport(server)) as mlf:
            mlf.get("users/get", username="alice")

        expected = base64.b64encode(b"alice:secret").decode()
        assert server.last.headers["authorization"] == f"Basic {expected}"

    def test_bearer_token(self, server):
        """Test token is passed as a bearer header."""
        from mlflow_rest.core.client import MLFlow
        from mlflow_rest.core.config import TrackingConfig

        server.add("GET", "users/get", json={})
        config = TrackingConfig(uri="http://mlflow.test", token="tok-123")

        with MLFlow(config=config, transport=httpx.MockTransport(server)) as mlf:
            mlf.get("users/get", username="alice")

        assert server.last.headers["authorization"] == "Bearer tok-123"

    def test_custom_headers(self, server, tracking_config):
        """Test user headers are sent on every request."""
        from mlflow_rest.core.client import MLFlow

        server.add("GET", "experiments/get", json={})

        with MLFlow(
            config=tracking_config,
            headers={"X-Request-Source": "tests"},
            transport=httpx.MockTransport(server),
        ) as mlf:
            mlf.get("experiments/get", experiment_id="1")

        assert server.last.headers["x-request-source"] == "tests"

    def test_explicit_authorization_wins_over_token(self, server):
        """Test a caller's Authorization header replaces the bearer token."""
        from mlflow_rest.core.client import MLFlow
        from mlflow_rest.core.config import TrackingConfig

        server.add("GET", "users/get", json={})
        config = TrackingConfig(uri="http://mlflow.test", token="tok-123")

        with MLFlow(
            config=config,
            headers={"authorization": "Custom xyz"},
            transport=httpx.MockTransport(server),
        ) as mlf:
            mlf.get("users/get", username="alice")

        assert server.last.headers.get_list("authorization") == ["Custom xyz"]

    def test_explicit_authorization_wins_over_basic_auth(self, server):
        """Test a caller's Authorization header replaces basic credentials."""
        from mlflow_rest.core.client import MLFlow
        from mlflow_rest.core.config import TrackingConfig

        server.add("GET", "users/get", json={})
        config = TrackingConfig(uri="http://mlflow.test", username="a", password="b")

        with MLFlow(
            config=config,
            headers={"authorization": "Custom xyz"},
            transport=httpx.MockTransport(server),
        ) as mlf:
            mlf.get("users/get", username="alice")

        assert server.last.headers.get_list("authorization") == ["Custom xyz"]

    def test_repr(self, mlf):
        """Test repr shows the API root."""
        assert "http://mlflow.test:5000/api" in repr(mlf)

    def test_get_client_is_cached(self):
        """Test the global client."""
        from mlflow_rest.core.client import get_client

        first = get_client()
        assert get_client() is first
        first.close()


class TestErrors:
    """Tests for error mapping."""

    def test_resource_does_not_exist(self, mlf, server):
        """Test error_code selects the exception class."""
        from mlflow_rest.core.errors import MLFlowHTTPError, ResourceDoesNotExist

        server.add(
            "GET",
            "experiments/get",
            status_code=404,
            json={"error_code": "RESOURCE_DOES_NOT_EXIST", "message": "No Experiment with id=99"},
        )

        with pytest.raises(ResourceDoesNotExist) as exc_info:
            mlf.get("experiments/get", experiment_id="99")

        err = exc_info.value
        assert isinstance(err, MLFlowHTTPError)
        assert err.status_code == 404
        assert err.error_code == "RESOURCE_DOES_NOT_EXIST"
        assert err.endpoint == "experiments/get"
        assert "No Experiment with id=99" in str(err)
        assert isinstance(err.__cause__, httpx.HTTPStatusError)

    def test_already_exists(self, mlf, server):
        """Test RESOURCE_ALREADY_EXISTS on a 400 response."""
        from mlflow_rest.core.errors import ResourceAlreadyExists

        server.add(
            "POST",
            "experiments/create",
            status_code=400,
            json={"error_code": "RESOURCE_ALREADY_EXISTS", "message": "exists"},
        )

        with pytest.raises(ResourceAlreadyExists):
            mlf.post("experiments/create", name="x")

    def test_status_fallback(self, mlf, server):
        """Test status code decides when the body is not JSON."""
        from mlflow_rest.core.errors import PermissionDenied

        server.add(
            "GET",
            "users/get",
            handler=lambda request: httpx.Response(403, text="Forbidden"),
        )

        with pytest.raises(PermissionDenied, match="Forbidden"):
            mlf.get("users/get", username="bob")

    def test_unknown_error(self, mlf, server):
        """Test unmapped errors use the base class."""
        from mlflow_rest.core.errors import MLFlowHTTPError

        server.add(
            "GET",
            "runs/get",
            status_code=500,
            json={"error_code": "INTERNAL_ERROR", "message": "boom"},
        )

        with pytest.raises(MLFlowHTTPError) as exc_info:
            mlf.get("runs/get", run_id="r")

        assert type(exc_info.value) is MLFlowHTTPError
        assert exc_info.value.error_code == "INTERNAL_ERROR"

    def test_connection_error(self, tracking_config):
        """Test transport failures are wrapped."""
        from mlflow_rest.core.client import MLFlow
        from mlflow_rest.core.errors import MLFlowConnectionError

        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        with MLFlow(config=tracking_config, transport=httpx.MockTransport(refuse)) as mlf:
            with pytest.raises(MLFlowConnectionError, match="mlflow.test"):
                mlf.get("experiments/get", experiment_id="1")


class TestLogging:
    """Tests for logging setup."""

    def test_setup_logging(self):
        """Test the package logger gets a rich handler."""
        import logging

        from rich.logging import RichHandler

        from mlflow_rest.core.logging import setup_logging

        setup_logging("DEBUG")
        setup_logging("INFO")

        logger = logging.getLogger("mlflow_rest")
        assert logger.level == logging.INFO
        assert sum(isinstance(h, RichHandler) for h in logger.handlers) == 1

    def test_requests_are_logged(self, mlf, server, caplog):
        """Test each request is logged at debug level."""
        import logging

        server.add("GET", "runs/get", json={})

        with caplog.at_level(logging.DEBUG, logger="mlflow_rest.core.client"):
            mlf.get("runs/get", run_id="r")

        assert any("GET runs/get -> 200" in r.getMessage() for r in caplog.records)
