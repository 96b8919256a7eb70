"""Stateless functions, one module per REST resource."""

from .experiment import (
    create_experiment,
    delete_experiment,
    get_experiment,
    get_experiment_by_name,
    get_or_create_experiment,
    iter_experiments,
    restore_experiment,
    search_experiments,
    set_experiment_tag,
    update_experiment,
)
from .loggers import log_batch, log_inputs, log_metric, log_param
from .misc import get_full_metric_history, get_metric_history, list_artifacts
from .permission import (
    create_experiment_permission,
    create_registered_model_permission,
    delete_experiment_permission,
    delete_registered_model_permission,
    get_experiment_permission,
    get_registered_model_permission,
    update_experiment_permission,
    update_registered_model_permission,
)
from .run import (
    create_run,
    delete_run,
    delete_run_tag,
    get_run,
    iter_runs,
    restore_run,
    search_runs,
    set_run_tag,
    update_run,
)
from .user import create_user, delete_user, get_user, update_user_admin, update_user_password

__all__ = [
    "create_experiment",
    "create_experiment_permission",
    "create_registered_model_permission",
    "create_run",
    "create_user",
    "delete_experiment",
    "delete_experiment_permission",
    "delete_registered_model_permission",
    "delete_run",
    "delete_run_tag",
    "delete_user",
    "get_experiment",
    "get_experiment_by_name",
    "get_experiment_permission",
    "get_full_metric_history",
    "get_metric_history",
    "get_or_create_experiment",
    "get_registered_model_permission",
    "get_run",
    "get_user",
    "iter_experiments",
    "iter_runs",
    "list_artifacts",
    "log_batch",
    "log_inputs",
    "log_metric",
    "log_param",
    "restore_experiment",
    "restore_run",
    "search_experiments",
    "search_runs",
    "set_experiment_tag",
    "set_run_tag",
    "update_experiment",
    "update_experiment_permission",
    "update_registered_model_permission",
    "update_run",
    "update_user_admin",
    "update_user_password",
]
