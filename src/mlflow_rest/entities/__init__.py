"""Typed records mirroring the tracking server's JSON payloads."""

from .common import FileInfo, Metric, Param, Tag, UpsertData, now_millis, to_records
from .experiment import Experiment, ViewType
from .run import Dataset, DatasetInput, Run, RunData, RunInfo, RunInputs, RunStatus
from .user import ExperimentPermission, Permission, RegisteredModelPermission, User

__all__ = [
    "Dataset",
    "DatasetInput",
    "Experiment",
    "ExperimentPermission",
    "FileInfo",
    "Metric",
    "Param",
    "Permission",
    "RegisteredModelPermission",
    "Run",
    "RunData",
    "RunInfo",
    "RunInputs",
    "RunStatus",
    "Tag",
    "UpsertData",
    "User",
    "ViewType",
    "now_millis",
    "to_records",
]
