"""Run records: info, data and inputs sections."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .common import Metric, Param, Tag, optional_int


class RunStatus(str, Enum):
    """Run status."""

    RUNNING = "RUNNING"
    SCHEDULED = "SCHEDULED"
    FINISHED = "FINISHED"
    FAILED = "FAILED"
    KILLED = "KILLED"


@dataclass(frozen=True)
class RunInfo:
    """Metadata of a run."""

    run_id: str
    experiment_id: str
    run_name: str | None = None
    status: RunStatus | None = None
    start_time: int | None = None
    end_time: int | None = None
    artifact_uri: str | None = None
    lifecycle_stage: str | None = None
    user_id: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RunInfo:
        status = data.get("status")
        return cls(
            run_id=data.get("run_id") or data["run_uuid"],
            experiment_id=str(data["experiment_id"]),
            run_name=data.get("run_name"),
            status=RunStatus(status) if status else None,
            start_time=optional_int(data.get("start_time")),
            end_time=optional_int(data.get("end_time")),
            artifact_uri=data.get("artifact_uri"),
            lifecycle_stage=data.get("lifecycle_stage"),
            user_id=data.get("user_id"),
        )


@dataclass(frozen=True)
class RunData:
    """Metrics (latest values), params and tags of a run."""

    metrics: list[Metric] = field(default_factory=list)
    params: list[Param] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RunData:
        return cls(
            metrics=[Metric.from_dict(m) for m in data.get("metrics", [])],
            params=[Param.from_dict(p) for p in data.get("params", [])],
            tags=[Tag.from_dict(t) for t in data.get("tags", [])],
        )

    @property
    def metrics_dict(self) -> dict[str, float]:
        return {m.key: m.value for m in self.metrics}

    @property
    def params_dict(self) -> dict[str, str]:
        return {p.key: p.value for p in self.params}

    @property
    def tags_dict(self) -> dict[str, str]:
        return {t.key: t.value for t in self.tags}


@dataclass(frozen=True)
class Dataset:
    """Dataset reference attached to a run as an input."""

    name: str
    digest: str
    source_type: str
    source: str
    schema: str | None = None
    profile: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Dataset:
        return cls(
            name=data["name"],
            digest=data["digest"],
            source_type=data["source_type"],
            source=data["source"],
            schema=data.get("schema"),
            profile=data.get("profile"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "digest": self.digest,
            "source_type": self.source_type,
            "source": self.source,
            "schema": self.schema,
            "profile": self.profile,
        }


@dataclass(frozen=True)
class DatasetInput:
    """A dataset used by a run, with input-specific tags (e.g. context)."""

    dataset: Dataset
    tags: list[Tag] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DatasetInput:
        return cls(
            dataset=Dataset.from_dict(data["dataset"]),
            tags=[Tag.from_dict(t) for t in data.get("tags", [])],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "tags": [t.to_dict() for t in self.tags],
            "dataset": self.dataset.to_dict(),
        }


@dataclass(frozen=True)
class RunInputs:
    """Inputs section of a run."""

    dataset_inputs: list[DatasetInput] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RunInputs:
        return cls(dataset_inputs=[DatasetInput.from_dict(d) for d in data.get("dataset_inputs", [])])


@dataclass(frozen=True)
class Run:
    """A run with its info, data and inputs sections."""

    info: RunInfo
    data: RunData = field(default_factory=RunData)
    inputs: RunInputs = field(default_factory=RunInputs)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Run:
        return cls(
            info=RunInfo.from_dict(data["info"]),
            data=RunData.from_dict(data.get("data") or {}),
            inputs=RunInputs.from_dict(data.get("inputs") or {}),
        )

    @property
    def run_id(self) -> str:
        return self.info.run_id
