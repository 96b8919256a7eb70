"""MLflow REST: typed bindings for the MLflow tracking REST API.

Experiments, runs, metrics, params, tags, users and permissions exposed as
plain functions taking an MLFlow connection and returning typed records.
"""

__version__ = "0.1.0"

from mlflow_rest.core import (
    MLFlow,
    MLFlowError,
    MLFlowHTTPError,
    ResourceAlreadyExists,
    ResourceDoesNotExist,
    Settings,
    get_client,
    get_settings,
)
from mlflow_rest.entities import (
    Dataset,
    DatasetInput,
    Experiment,
    Metric,
    Param,
    Permission,
    Run,
    RunStatus,
    Tag,
    User,
    ViewType,
)
from mlflow_rest.services import *  # noqa: F401,F403
from mlflow_rest.services import __all__ as _services_all

__all__ = [
    "Dataset",
    "DatasetInput",
    "Experiment",
    "MLFlow",
    "MLFlowError",
    "MLFlowHTTPError",
    "Metric",
    "Param",
    "Permission",
    "ResourceAlreadyExists",
    "ResourceDoesNotExist",
    "Run",
    "RunStatus",
    "Settings",
    "Tag",
    "User",
    "ViewType",
    "__version__",
    "get_client",
    "get_settings",
    *_services_all,
]
