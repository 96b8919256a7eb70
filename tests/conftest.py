"""Pytest fixtures for mlflow-rest tests."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from mlflow_rest.core.client import MLFlow
from mlflow_rest.core.config import TrackingConfig

API_PREFIX = "/api/2.0/mlflow/"


class FakeServer:
    """Records requests and answers them from registered routes."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}

    def add(
        self,
        method: str,
        endpoint: str,
        json: Any = None,
        status_code: int = 200,
        handler: Callable[[httpx.Request], httpx.Response] | None = None,
    ) -> None:
        """Register the response for ``METHOD endpoint``."""
        if handler is None:
            payload = {} if json is None else json

            def handler(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status_code, json=payload)

        self.routes[(method, endpoint)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        endpoint = request.url.path.split(API_PREFIX, 1)[-1]
        handler = self.routes.get((request.method, endpoint))
        if handler is None:
            return httpx.Response(
                404,
                json={"error_code": "ENDPOINT_NOT_FOUND", "message": f"No route {endpoint}"},
            )
        return handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> dict[str, Any]:
        return json.loads(self.last.content)

    def calls(self, endpoint: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(API_PREFIX + endpoint)]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep real MLflow settings out of the tests."""
    import mlflow_rest.core.client as client_module
    import mlflow_rest.core.config as config_module

    for name in (
        "MLFLOW_TRACKING_URI",
        "MLFLOW_TRACKING_USERNAME",
        "MLFLOW_TRACKING_PASSWORD",
        "MLFLOW_TRACKING_TOKEN",
        "MLFLOW_REST_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "_settings", None)
    monkeypatch.setattr(client_module, "_client", None)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def server() -> FakeServer:
    """Fake tracking server."""
    return FakeServer()


@pytest.fixture
def tracking_config() -> TrackingConfig:
    return TrackingConfig(uri="http://mlflow.test:5000")


@pytest.fixture
def mlf(server: FakeServer, tracking_config: TrackingConfig):
    """Connection wired to the fake server."""
    with MLFlow(config=tracking_config, transport=httpx.MockTransport(server)) as instance:
        yield instance


@pytest.fixture
def experiment_json() -> dict[str, Any]:
    return {
        "experiment_id": "7",
        "name": "gait-baseline",
        "artifact_location": "mlflow-artifacts:/7",
        "lifecycle_stage": "active",
        "last_update_time": "1704067200000",
        "creation_time": 1704067200000,
        "tags": [{"key": "team", "value": "vision"}],
    }


@pytest.fixture
def run_json() -> dict[str, Any]:
    return {
        "info": {
            "run_id": "a1b2c3d4e5f6",
            "run_uuid": "a1b2c3d4e5f6",
            "run_name": "rf-baseline",
            "experiment_id": "7",
            "user_id": "alice",
            "status": "RUNNING",
            "start_time": 1704067200000,
            "artifact_uri": "mlflow-artifacts:/7/a1b2c3d4e5f6/artifacts",
            "lifecycle_stage": "active",
        },
        "data": {
            "metrics": [
                {"key": "accuracy", "value": 0.91, "timestamp": 1704067260000, "step": 3},
                {"key": "loss", "value": "NaN", "timestamp": 1704067260000, "step": 3},
            ],
            "params": [{"key": "n_estimators", "value": "100"}],
            "tags": [{"key": "mlflow.runName", "value": "rf-baseline"}],
        },
        "inputs": {
            "dataset_inputs": [
                {
                    "tags": [{"key": "mlflow.data.context", "value": "train"}],
                    "dataset": {
                        "name": "care-pd",
                        "digest": "d41d8cd9",
                        "source_type": "http",
                        "source": '{"url": "https://example.com/care-pd.csv"}',
                    },
                }
            ]
        },
    }
