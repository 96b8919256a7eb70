"""Key/value records shared by experiments and runs."""

from __future__ import annotations

import math
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar, Union

T = TypeVar("T", "Tag", "Param", "Metric")

# Tags, params and metrics may be passed as a mapping, entity instances,
# {"key": ..., "value": ...} dicts or (key, value) pairs.
UpsertData = Union[Mapping[str, Any], Sequence[Any], None]


def now_millis() -> int:
    """Current Unix time in milliseconds."""
    return int(time.time() * 1000)


def optional_int(value: Any) -> int | None:
    """Parse an int64 field that the server may send as a string."""
    if value is None or value == "":
        return None
    return int(value)


def _float(value: Any) -> float:
    # Non-finite metrics come back as "NaN" / "Infinity" strings.
    if isinstance(value, str):
        return float(value.replace("Infinity", "inf"))
    return float(value)


def _float_json(value: float) -> Any:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return value


@dataclass(frozen=True)
class Tag:
    """A string key/value tag on an experiment, run or dataset input."""

    key: str
    value: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Tag:
        return cls(key=data["key"], value=data.get("value", ""))

    @classmethod
    def from_pair(cls, key: Any, value: Any) -> Tag:
        return cls(key=str(key), value=str(value))

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "value": self.value}


@dataclass(frozen=True)
class Param(Tag):
    """A run parameter. Parameters are immutable once logged."""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Param:
        return cls(key=data["key"], value=data.get("value", ""))

    @classmethod
    def from_pair(cls, key: Any, value: Any) -> Param:
        return cls(key=str(key), value=str(value))


@dataclass(frozen=True)
class Metric:
    """A metric value with its timestamp (ms) and optional step."""

    key: str
    value: float
    timestamp: int | None = None
    step: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Metric:
        return cls(
            key=data["key"],
            value=_float(data["value"]),
            timestamp=optional_int(data.get("timestamp")),
            step=optional_int(data.get("step")),
        )

    @classmethod
    def from_pair(cls, key: Any, value: Any) -> Metric:
        return cls(key=str(key), value=_float(value), timestamp=now_millis())

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "value": _float_json(self.value),
            "timestamp": self.timestamp,
            "step": self.step,
        }


@dataclass(frozen=True)
class FileInfo:
    """An entry of an artifact listing."""

    path: str
    is_dir: bool = False
    file_size: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FileInfo:
        return cls(
            path=data["path"],
            is_dir=bool(data.get("is_dir", False)),
            file_size=optional_int(data.get("file_size")),
        )


def to_records(cls: type[T], data: UpsertData) -> list[T]:
    """Normalise upsert data into a list of ``cls`` records."""
    if data is None:
        return []
    if isinstance(data, Mapping):
        return [cls.from_pair(key, value) for key, value in data.items()]
    if isinstance(data, (str, bytes)):
        raise TypeError(f"Cannot build {cls.__name__} records from a string")

    records: list[T] = []
    for item in data:
        if isinstance(item, cls):
            records.append(item)
        elif isinstance(item, Mapping):
            if "key" in item:
                records.append(cls.from_dict(item))
            else:
                records.extend(cls.from_pair(k, v) for k, v in item.items())
        elif isinstance(item, Sequence) and not isinstance(item, str) and len(item) == 2:
            records.append(cls.from_pair(item[0], item[1]))
        else:
            raise TypeError(f"Cannot build a {cls.__name__} from {item!r}")
    return records
