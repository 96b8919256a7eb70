"""Core infrastructure modules."""

from .client import MLFlow, get_client
from .config import LoggingConfig, Settings, TrackingConfig, get_settings, reload_settings
from .errors import (
    InvalidParameterValue,
    MLFlowConnectionError,
    MLFlowError,
    MLFlowHTTPError,
    PermissionDenied,
    ResourceAlreadyExists,
    ResourceDoesNotExist,
    Unauthenticated,
)
from .logging import setup_logging

__all__ = [
    "InvalidParameterValue",
    "LoggingConfig",
    "MLFlow",
    "MLFlowConnectionError",
    "MLFlowError",
    "MLFlowHTTPError",
    "PermissionDenied",
    "ResourceAlreadyExists",
    "ResourceDoesNotExist",
    "Settings",
    "TrackingConfig",
    "Unauthenticated",
    "get_client",
    "get_settings",
    "reload_settings",
    "setup_logging",
]
