"""Experiment endpoints."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

from mlflow_rest.core.client import MLFlow
from mlflow_rest.core.errors import ResourceAlreadyExists, ResourceDoesNotExist
from mlflow_rest.entities import Experiment, Tag, UpsertData, ViewType, to_records

from .common import ExperimentRef, experiment_id_of

logger = logging.getLogger(__name__)


def create_experiment(
    instance: MLFlow,
    name: str,
    artifact_location: str | None = None,
    tags: UpsertData = None,
) -> str:
    """
    Create an experiment and return its id.

    Fails with ResourceAlreadyExists if an experiment with the same name
    exists, including a deleted one.

    Args:
        instance: Tracking server connection
        name: Experiment name
        artifact_location: Where the experiment's artifacts are stored;
            the server picks a default when omitted
        tags: Tags to set on the experiment

    Returns:
        The new experiment id
    """
    result = instance.post(
        "experiments/create",
        name=name,
        artifact_location=artifact_location,
        tags=to_records(Tag, tags),
    )
    return str(result["experiment_id"])


def get_experiment(instance: MLFlow, experiment_id: ExperimentRef) -> Experiment:
    """Get experiment metadata. Works on deleted experiments."""
    result = instance.get("experiments/get", experiment_id=experiment_id_of(experiment_id))
    return Experiment.from_dict(result["experiment"])


def get_experiment_by_name(instance: MLFlow, experiment_name: str) -> Experiment:
    """
    Get experiment metadata by name.

    Deleted experiments are returned too, but an active experiment wins when
    an active and a deleted one share the name.
    """
    result = instance.get("experiments/get-by-name", experiment_name=experiment_name)
    return Experiment.from_dict(result["experiment"])


def delete_experiment(instance: MLFlow, experiment: ExperimentRef) -> bool:
    """Mark an experiment and its runs, metrics, params and tags for deletion."""
    instance.post("experiments/delete", experiment_id=experiment_id_of(experiment))
    return True


def restore_experiment(instance: MLFlow, experiment: ExperimentRef) -> bool:
    """Restore an experiment marked for deletion, with its runs."""
    instance.post("experiments/restore", experiment_id=experiment_id_of(experiment))
    return True


def update_experiment(instance: MLFlow, experiment: ExperimentRef, new_name: str) -> bool:
    """Rename an experiment. The new name must be unique."""
    instance.post(
        "experiments/update",
        experiment_id=experiment_id_of(experiment),
        new_name=new_name,
    )
    return True


def search_experiments(
    instance: MLFlow,
    max_results: int = 20000,
    page_token: str = "",
    filter: str = "",
    order_by: Sequence[str] | None = None,
    view_type: ViewType = ViewType.ACTIVE_ONLY,
) -> tuple[list[Experiment], str | None]:
    """
    Search experiments.

    Args:
        instance: Tracking server connection
        max_results: Maximum number of experiments per page
        page_token: Token of the page to fetch
        filter: Filter expression over experiment attributes and tags,
            e.g. ``name LIKE 'prod-%'``
        order_by: Columns to order by, with optional ``ASC``/``DESC``
        view_type: Lifecycle stages to include

    Returns:
        Experiments of the page and the next page token (None on last page)
    """
    params = {
        "max_results": max_results,
        "page_token": page_token,
        "filter": filter,
        "view_type": view_type,
    }
    if order_by:
        params["order_by"] = list(order_by)

    result = instance.get("experiments/search", **params)

    experiments = [Experiment.from_dict(e) for e in result.get("experiments", [])]
    return experiments, result.get("next_page_token") or None


def iter_experiments(
    instance: MLFlow,
    filter: str = "",
    order_by: Sequence[str] | None = None,
    view_type: ViewType = ViewType.ACTIVE_ONLY,
    page_size: int = 1000,
) -> Iterator[Experiment]:
    """Iterate over all matching experiments, following page tokens."""
    page_token = ""
    while True:
        experiments, page_token = search_experiments(
            instance,
            max_results=page_size,
            page_token=page_token,
            filter=filter,
            order_by=order_by,
            view_type=view_type,
        )
        yield from experiments
        if not page_token:
            return


def set_experiment_tag(instance: MLFlow, experiment: ExperimentRef, key: str, value: str) -> bool:
    """Set a tag on an experiment. Experiment tags can be updated."""
    instance.post(
        "experiments/set-experiment-tag",
        experiment_id=experiment_id_of(experiment),
        key=key,
        value=value,
    )
    return True


def get_or_create_experiment(
    instance: MLFlow,
    name: str,
    artifact_location: str | None = None,
    tags: UpsertData = None,
    restore: bool = False,
) -> Experiment:
    """
    Fetch an experiment by name, creating it when it does not exist.

    Args:
        instance: Tracking server connection
        name: Experiment name
        artifact_location: Used only when the experiment is created
        tags: Used only when the experiment is created
        restore: Restore the experiment if the one found is deleted

    Returns:
        The existing or newly created experiment
    """
    try:
        experiment = get_experiment_by_name(instance, name)
    except ResourceDoesNotExist:
        try:
            experiment_id = create_experiment(instance, name, artifact_location, tags)
        except ResourceAlreadyExists:
            # Created concurrently by another client
            return get_experiment_by_name(instance, name)
        logger.info("Created experiment %r (id %s)", name, experiment_id)
        return get_experiment(instance, experiment_id)

    if restore and experiment.is_deleted:
        restore_experiment(instance, experiment)
        logger.info("Restored deleted experiment %r (id %s)", name, experiment.experiment_id)
        return get_experiment(instance, experiment.experiment_id)

    return experiment
