"""Users and permissions of the tracking server's auth layer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Permission(str, Enum):
    """Permission levels."""

    READ = "READ"
    EDIT = "EDIT"
    MANAGE = "MANAGE"
    NO_PERMISSIONS = "NO_PERMISSIONS"


@dataclass(frozen=True)
class ExperimentPermission:
    """Permission of a user on an experiment."""

    experiment_id: str
    user_id: str
    permission: Permission

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ExperimentPermission:
        return cls(
            experiment_id=str(data["experiment_id"]),
            user_id=str(data["user_id"]),
            permission=Permission(data["permission"]),
        )


@dataclass(frozen=True)
class RegisteredModelPermission:
    """Permission of a user on a registered model."""

    name: str
    user_id: str
    permission: Permission

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RegisteredModelPermission:
        return cls(
            name=data["name"],
            user_id=str(data["user_id"]),
            permission=Permission(data["permission"]),
        )


@dataclass(frozen=True)
class User:
    """A tracking server user."""

    id: str
    username: str
    is_admin: bool = False
    experiment_permissions: list[ExperimentPermission] = field(default_factory=list)
    registered_model_permissions: list[RegisteredModelPermission] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> User:
        return cls(
            id=str(data["id"]),
            username=data["username"],
            is_admin=bool(data.get("is_admin", False)),
            experiment_permissions=[
                ExperimentPermission.from_dict(p) for p in data.get("experiment_permissions", [])
            ],
            registered_model_permissions=[
                RegisteredModelPermission.from_dict(p)
                for p in data.get("registered_model_permissions", [])
            ],
        )
