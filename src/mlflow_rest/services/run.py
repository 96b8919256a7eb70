"""Run endpoints."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from mlflow_rest.core.client import MLFlow
from mlflow_rest.entities import Run, RunInfo, RunStatus, Tag, UpsertData, ViewType, now_millis, to_records

from .common import ExperimentRef, RunRef, experiment_id_of, run_id_of


def create_run(
    instance: MLFlow,
    experiment_id: ExperimentRef,
    run_name: str | None = None,
    start_time: int | None = None,
    tags: UpsertData = None,
) -> Run:
    """
    Create a new run within an experiment.

    Args:
        instance: Tracking server connection
        experiment_id: Experiment id or Experiment
        run_name: Name of the run
        start_time: Unix timestamp in milliseconds; defaults to now
        tags: Tags to set on the run

    Returns:
        The created run
    """
    result = instance.post(
        "runs/create",
        experiment_id=experiment_id_of(experiment_id),
        run_name=run_name,
        start_time=start_time if start_time is not None else now_millis(),
        tags=to_records(Tag, tags),
    )
    return Run.from_dict(result["run"])


def get_run(instance: MLFlow, run_id: RunRef) -> Run:
    """Get a run. Metrics hold the latest value logged for each key."""
    result = instance.get("runs/get", run_id=run_id_of(run_id))
    return Run.from_dict(result["run"])


def update_run(
    instance: MLFlow,
    run: RunRef,
    status: RunStatus | str | None = None,
    end_time: int | None = None,
    run_name: str | None = None,
) -> RunInfo:
    """Update run status, end time or name. Returns the updated run info."""
    result = instance.post(
        "runs/update",
        run_id=run_id_of(run),
        status=RunStatus(status) if status is not None else None,
        end_time=end_time,
        run_name=run_name,
    )
    return RunInfo.from_dict(result["run_info"])


def delete_run(instance: MLFlow, run: RunRef) -> bool:
    """Mark a run for deletion."""
    instance.post("runs/delete", run_id=run_id_of(run))
    return True


def restore_run(instance: MLFlow, run: RunRef) -> bool:
    """Restore a deleted run."""
    instance.post("runs/restore", run_id=run_id_of(run))
    return True


def search_runs(
    instance: MLFlow,
    experiment_ids: ExperimentRef | Sequence[ExperimentRef],
    filter: str = "",
    run_view_type: ViewType = ViewType.ACTIVE_ONLY,
    max_results: int = 1000,
    order_by: Sequence[str] | None = None,
    page_token: str = "",
) -> tuple[list[Run], str | None]:
    """
    Search runs in one or more experiments.

    Args:
        instance: Tracking server connection
        experiment_ids: Experiments to search
        filter: Filter over metrics, params and tags,
            e.g. ``metrics.rmse < 1 and params.model = 'tree'``
        run_view_type: Lifecycle stages to include
        max_results: Maximum number of runs per page
        order_by: Columns to order by, e.g. ``metrics.rmse DESC``
        page_token: Token of the page to fetch

    Returns:
        Runs of the page and the next page token (None on last page)
    """
    if isinstance(experiment_ids, (str, int)) or not isinstance(experiment_ids, Sequence):
        experiment_ids = [experiment_ids]

    body = {
        "experiment_ids": [experiment_id_of(e) for e in experiment_ids],
        "filter": filter,
        "run_view_type": run_view_type,
        "max_results": max_results,
        "page_token": page_token or None,
    }
    if order_by:
        body["order_by"] = list(order_by)

    result = instance.post("runs/search", **body)

    runs = [Run.from_dict(r) for r in result.get("runs", [])]
    return runs, result.get("next_page_token") or None


def iter_runs(
    instance: MLFlow,
    experiment_ids: ExperimentRef | Sequence[ExperimentRef],
    filter: str = "",
    run_view_type: ViewType = ViewType.ACTIVE_ONLY,
    order_by: Sequence[str] | None = None,
    page_size: int = 1000,
) -> Iterator[Run]:
    """Iterate over all matching runs, following page tokens."""
    page_token = ""
    while True:
        runs, page_token = search_runs(
            instance,
            experiment_ids,
            filter=filter,
            run_view_type=run_view_type,
            max_results=page_size,
            order_by=order_by,
            page_token=page_token,
        )
        yield from runs
        if not page_token:
            return


def set_run_tag(instance: MLFlow, run: RunRef, key: str, value: str) -> bool:
    """Set a tag on a run. Tags can be overwritten."""
    instance.post("runs/set-tag", run_id=run_id_of(run), key=key, value=value)
    return True


def delete_run_tag(instance: MLFlow, run: RunRef, key: str) -> bool:
    """Delete a tag from a run."""
    instance.post("runs/delete-tag", run_id=run_id_of(run), key=key)
    return True
