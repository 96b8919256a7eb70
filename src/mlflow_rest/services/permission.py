"""Experiment and registered model permission endpoints."""

from __future__ import annotations

from mlflow_rest.core.client import MLFlow
from mlflow_rest.entities import ExperimentPermission, Permission, RegisteredModelPermission

from .common import ExperimentRef, experiment_id_of


def create_experiment_permission(
    instance: MLFlow,
    experiment: ExperimentRef,
    username: str,
    permission: Permission | str,
) -> ExperimentPermission:
    """Grant a user a permission on an experiment."""
    result = instance.post(
        "experiments/permissions/create",
        experiment_id=experiment_id_of(experiment),
        username=username,
        permission=Permission(permission),
    )
    return ExperimentPermission.from_dict(result["experiment_permission"])


def get_experiment_permission(
    instance: MLFlow, experiment: ExperimentRef, username: str
) -> ExperimentPermission:
    result = instance.get(
        "experiments/permissions/get",
        experiment_id=experiment_id_of(experiment),
        username=username,
    )
    return ExperimentPermission.from_dict(result["experiment_permission"])


def update_experiment_permission(
    instance: MLFlow,
    experiment: ExperimentRef,
    username: str,
    permission: Permission | str,
) -> bool:
    instance.patch(
        "experiments/permissions/update",
        experiment_id=experiment_id_of(experiment),
        username=username,
        permission=Permission(permission),
    )
    return True


def delete_experiment_permission(instance: MLFlow, experiment: ExperimentRef, username: str) -> bool:
    instance.delete(
        "experiments/permissions/delete",
        experiment_id=experiment_id_of(experiment),
        username=username,
    )
    return True


def create_registered_model_permission(
    instance: MLFlow,
    name: str,
    username: str,
    permission: Permission | str,
) -> RegisteredModelPermission:
    """Grant a user a permission on a registered model."""
    result = instance.post(
        "registered-models/permissions/create",
        name=name,
        username=username,
        permission=Permission(permission),
    )
    return RegisteredModelPermission.from_dict(result["registered_model_permission"])


def get_registered_model_permission(
    instance: MLFlow, name: str, username: str
) -> RegisteredModelPermission:
    result = instance.get("registered-models/permissions/get", name=name, username=username)
    return RegisteredModelPermission.from_dict(result["registered_model_permission"])


def update_registered_model_permission(
    instance: MLFlow,
    name: str,
    username: str,
    permission: Permission | str,
) -> bool:
    instance.patch(
        "registered-models/permissions/update",
        name=name,
        username=username,
        permission=Permission(permission),
    )
    return True


def delete_registered_model_permission(instance: MLFlow, name: str, username: str) -> bool:
    instance.delete("registered-models/permissions/delete", name=name, username=username)
    return True
