"""Logging metrics, params, tags and inputs to runs."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from mlflow_rest.core.client import MLFlow
from mlflow_rest.entities import DatasetInput, Metric, Param, Tag, UpsertData, now_millis, to_records

from .common import RunRef, run_id_of


def log_metric(
    instance: MLFlow,
    run: RunRef,
    key: str,
    value: float,
    timestamp: int | None = None,
    step: int | None = None,
) -> bool:
    """
    Log a metric for a run.

    A metric can be logged many times; each value is kept in the history.

    Args:
        instance: Tracking server connection
        run: Run id or Run
        key: Metric name
        value: Metric value
        timestamp: Unix timestamp in milliseconds; defaults to now
        step: Training step the value belongs to
    """
    metric = Metric(
        key=key,
        value=float(value),
        timestamp=timestamp if timestamp is not None else now_millis(),
        step=step,
    )
    instance.post("runs/log-metric", run_id=run_id_of(run), **metric.to_dict())
    return True


def log_param(instance: MLFlow, run: RunRef, key: str, value: object) -> bool:
    """Log a param for a run. A param can be logged only once per run."""
    param = Param.from_pair(key, value)
    instance.post("runs/log-parameter", run_id=run_id_of(run), **param.to_dict())
    return True


def log_batch(
    instance: MLFlow,
    run: RunRef,
    metrics: UpsertData = None,
    params: UpsertData = None,
    tags: UpsertData = None,
) -> bool:
    """
    Log metrics, params and tags for a run in a single request.

    The server may write part of the batch before failing. Metrics without
    a timestamp are stamped with the current time.
    """
    stamp = now_millis()
    metric_records = [
        m if m.timestamp is not None else replace(m, timestamp=stamp)
        for m in to_records(Metric, metrics)
    ]
    instance.post(
        "runs/log-batch",
        run_id=run_id_of(run),
        metrics=metric_records,
        params=to_records(Param, params),
        tags=to_records(Tag, tags),
    )
    return True


def log_inputs(instance: MLFlow, run: RunRef, datasets: Sequence[DatasetInput]) -> bool:
    """Log dataset inputs for a run."""
    instance.post("runs/log-inputs", run_id=run_id_of(run), datasets=list(datasets))
    return True
