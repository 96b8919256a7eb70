"""User management endpoints of the auth layer."""

from __future__ import annotations

from mlflow_rest.core.client import MLFlow
from mlflow_rest.entities import User


def create_user(instance: MLFlow, username: str, password: str) -> User:
    """Create a user. Requires admin credentials."""
    result = instance.post("users/create", username=username, password=password)
    return User.from_dict(result["user"])


def get_user(instance: MLFlow, username: str) -> User:
    """Get a user with the permissions granted to them."""
    result = instance.get("users/get", username=username)
    return User.from_dict(result["user"])


def update_user_password(instance: MLFlow, username: str, password: str) -> bool:
    instance.patch("users/update-password", username=username, password=password)
    return True


def update_user_admin(instance: MLFlow, username: str, is_admin: bool) -> bool:
    instance.patch("users/update-admin", username=username, is_admin=is_admin)
    return True


def delete_user(instance: MLFlow, username: str) -> bool:
    instance.delete("users/delete", username=username)
    return True
