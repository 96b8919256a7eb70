"""Experiment records."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .common import Tag, optional_int


class ViewType(str, Enum):
    """Which lifecycle stages a search returns."""

    ACTIVE_ONLY = "ACTIVE_ONLY"
    DELETED_ONLY = "DELETED_ONLY"
    ALL = "ALL"


@dataclass(frozen=True)
class Experiment:
    """Experiment metadata as returned by the tracking server."""

    experiment_id: str
    name: str
    artifact_location: str | None = None
    lifecycle_stage: str | None = None
    last_update_time: int | None = None
    creation_time: int | None = None
    tags: list[Tag] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Experiment:
        return cls(
            experiment_id=str(data["experiment_id"]),
            name=data.get("name", ""),
            artifact_location=data.get("artifact_location"),
            lifecycle_stage=data.get("lifecycle_stage"),
            last_update_time=optional_int(data.get("last_update_time")),
            creation_time=optional_int(data.get("creation_time")),
            tags=[Tag.from_dict(t) for t in data.get("tags", [])],
        )

    @property
    def is_deleted(self) -> bool:
        return self.lifecycle_stage == "deleted"

    @property
    def tags_dict(self) -> dict[str, str]:
        return {t.key: t.value for t in self.tags}
