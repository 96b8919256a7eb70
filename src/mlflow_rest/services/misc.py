"""Metric history and artifact listings."""

from __future__ import annotations

from mlflow_rest.core.client import MLFlow
from mlflow_rest.entities import FileInfo, Metric

from .common import RunRef, run_id_of


def get_metric_history(
    instance: MLFlow,
    run: RunRef,
    metric_key: str,
    page_token: str = "",
    max_results: int | None = None,
) -> tuple[list[Metric], str | None]:
    """Get every logged value of a metric, one page at a time."""
    result = instance.get(
        "metrics/get-history",
        run_id=run_id_of(run),
        metric_key=metric_key,
        page_token=page_token or None,
        max_results=max_results,
    )
    metrics = [Metric.from_dict(m) for m in result.get("metrics", [])]
    return metrics, result.get("next_page_token") or None


def get_full_metric_history(instance: MLFlow, run: RunRef, metric_key: str) -> list[Metric]:
    """Get every logged value of a metric across all pages, ordered by step."""
    history: list[Metric] = []
    page_token = ""
    while True:
        metrics, page_token = get_metric_history(instance, run, metric_key, page_token=page_token)
        history.extend(metrics)
        if not page_token:
            break
    return sorted(history, key=lambda m: (m.step or 0, m.timestamp or 0))


def list_artifacts(
    instance: MLFlow,
    run: RunRef,
    path: str | None = None,
    page_token: str | None = None,
) -> tuple[str | None, list[FileInfo], str | None]:
    """
    List artifacts of a run.

    Returns:
        Root artifact URI, the files under ``path`` and the next page token
    """
    result = instance.get(
        "artifacts/list",
        run_id=run_id_of(run),
        path=path,
        page_token=page_token,
    )
    files = [FileInfo.from_dict(f) for f in result.get("files", [])]
    return result.get("root_uri"), files, result.get("next_page_token") or None
