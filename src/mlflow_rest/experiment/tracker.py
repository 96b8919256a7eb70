"""
Experiment Tracking over the REST API
=====================================

Track experiments and log params, metrics and tags without the mlflow package.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Generator

from mlflow_rest.core.client import MLFlow
from mlflow_rest.entities import Experiment, Run, RunStatus, now_millis
from mlflow_rest.services import (
    create_run,
    get_or_create_experiment,
    get_run,
    log_batch,
    log_metric,
    search_runs,
    set_experiment_tag,
    set_run_tag,
    update_run,
)

logger = logging.getLogger(__name__)

NOTE_TAG = "mlflow.note.content"
RUN_NAME_TAG = "mlflow.runName"


class ExperimentTracker:
    """
    REST-based experiment tracker.

    Usage:
        tracker = ExperimentTracker("my-experiment", "http://localhost:5000")

        with tracker.start_run("baseline-v1") as run:
            tracker.log_params({"model": "RandomForest", "n_estimators": 100})
            tracker.log_metrics({"accuracy": 0.85, "f1": 0.82})
    """

    def __init__(
        self,
        experiment_name: str,
        tracking_uri: str | None = None,
        description: str = "",
        instance: MLFlow | None = None,
    ):
        self.experiment_name = experiment_name
        self.description = description
        self.instance = instance or MLFlow(tracking_uri)
        self._experiment: Experiment | None = None
        self._active_run: Run | None = None

        self._setup()

    def _setup(self):
        """Get or create the experiment."""
        self._experiment = get_or_create_experiment(self.instance, self.experiment_name)
        if self.description:
            set_experiment_tag(self.instance, self._experiment, NOTE_TAG, self.description)

    @property
    def experiment_id(self) -> str:
        """Get current experiment ID."""
        return self._experiment.experiment_id

    @property
    def active_run(self) -> Run | None:
        """Get active run if any."""
        return self._active_run

    def _require_run(self) -> Run:
        if self._active_run is None:
            raise RuntimeError("No active run. Use 'with tracker.start_run(...)' first.")
        return self._active_run

    @contextmanager
    def start_run(
        self,
        run_name: str | None = None,
        description: str = "",
        tags: dict[str, str] | None = None,
    ) -> Generator[Run, None, None]:
        """
        Start a new run.

        The run is marked FINISHED when the block exits normally and FAILED
        when it raises.

        Args:
            run_name: Name for the run
            description: Run description
            tags: Additional tags

        Yields:
            The created run
        """
        all_tags = dict(tags or {})
        if description:
            all_tags[NOTE_TAG] = description

        run = create_run(self.instance, self.experiment_id, run_name=run_name, tags=all_tags)
        self._active_run = run
        logger.debug("Started run %s in experiment %s", run.run_id, self.experiment_id)
        try:
            yield run
        except BaseException:
            update_run(self.instance, run, status=RunStatus.FAILED, end_time=now_millis())
            raise
        else:
            update_run(self.instance, run, status=RunStatus.FINISHED, end_time=now_millis())
        finally:
            self._active_run = None

    def log_params(self, params: dict[str, Any]):
        """Log parameters."""
        converted = {}
        for key, value in params.items():
            if isinstance(value, (list, dict)):
                value = json.dumps(value)
            converted[key] = value
        log_batch(self.instance, self._require_run(), params=converted)

    def log_metrics(self, metrics: dict[str, float], step: int | None = None):
        """Log metrics."""
        timestamp = now_millis()
        batch = [
            {"key": key, "value": value, "timestamp": timestamp, "step": step}
            for key, value in metrics.items()
        ]
        log_batch(self.instance, self._require_run(), metrics=batch)

    def log_metric(self, key: str, value: float, step: int | None = None):
        """Log single metric."""
        log_metric(self.instance, self._require_run(), key, value, step=step)

    def set_tag(self, key: str, value: str):
        """Set a tag on the current run."""
        set_run_tag(self.instance, self._require_run(), key, value)

    def set_tags(self, tags: dict[str, str]):
        """Set multiple tags."""
        log_batch(self.instance, self._require_run(), tags=tags)

    def get_run(self, run_id: str) -> Run:
        """Get run by ID."""
        return get_run(self.instance, run_id)

    def list_runs(
        self,
        filter_string: str = "",
        max_results: int = 100,
        order_by: list[str] | None = None,
    ) -> list[Run]:
        """List runs in the experiment."""
        runs, _ = search_runs(
            self.instance,
            [self.experiment_id],
            filter=filter_string,
            max_results=max_results,
            order_by=order_by or ["attributes.start_time DESC"],
        )
        return runs

    def get_best_run(
        self,
        metric: str,
        maximize: bool = True,
    ) -> Run | None:
        """Get best run by metric."""
        order = "DESC" if maximize else "ASC"
        runs = self.list_runs(
            order_by=[f"metrics.`{metric}` {order}"],
            max_results=1,
        )
        # Runs without the metric sort last
        if not runs or metric not in runs[0].data.metrics_dict:
            return None
        return runs[0]

    def compare_runs(
        self,
        run_ids: list[str],
        metrics: list[str],
    ) -> dict[str, dict[str, float | None]]:
        """Compare metrics across runs."""
        results = {}
        for run_id in run_ids:
            run_metrics = self.get_run(run_id).data.metrics_dict
            results[run_id] = {m: run_metrics.get(m) for m in metrics}
        return results

    def close(self) -> None:
        self.instance.close()


@dataclass
class ExperimentResult:
    """Result of an experiment run."""

    run_id: str
    run_name: str
    experiment_name: str
    params: dict[str, Any]
    metrics: dict[str, float]
    tags: dict[str, str]
    start_time: datetime | None
    end_time: datetime | None
    status: str
    artifact_uri: str

    @classmethod
    def from_run(cls, run: Run, experiment_name: str) -> "ExperimentResult":
        """Create from a Run record."""
        info = run.info
        return cls(
            run_id=info.run_id,
            run_name=info.run_name or run.data.tags_dict.get(RUN_NAME_TAG, ""),
            experiment_name=experiment_name,
            params=run.data.params_dict,
            metrics=run.data.metrics_dict,
            tags=run.data.tags_dict,
            start_time=datetime.fromtimestamp(info.start_time / 1000) if info.start_time else None,
            end_time=datetime.fromtimestamp(info.end_time / 1000) if info.end_time else None,
            status=info.status.value if info.status else "",
            artifact_uri=info.artifact_uri or "",
        )


def run_experiment(
    experiment_name: str,
    run_name: str,
    train_fn: Callable[[dict[str, Any]], Any],
    params: dict[str, Any],
    tracking_uri: str | None = None,
    instance: MLFlow | None = None,
) -> ExperimentResult:
    """
    Run an experiment with automatic tracking.

    Args:
        experiment_name: Name of the experiment
        run_name: Name for this run
        train_fn: Training function that returns dict of metrics
        params: Parameters to log
        tracking_uri: Tracking server URI
        instance: Existing connection to use instead of tracking_uri

    Returns:
        ExperimentResult with run details
    """
    tracker = ExperimentTracker(experiment_name, tracking_uri, instance=instance)

    try:
        with tracker.start_run(run_name) as run:
            tracker.log_params(params)

            # Run training
            metrics = train_fn(params)

            # Log metrics
            if isinstance(metrics, dict):
                tracker.log_metrics(metrics)

        return ExperimentResult.from_run(
            tracker.get_run(run.run_id),
            experiment_name,
        )
    finally:
        # Only close connections opened here
        if instance is None:
            tracker.close()
