"""Exceptions raised by the tracking client."""

from __future__ import annotations

import httpx


class MLFlowError(Exception):
    """Base class for all client errors."""


class MLFlowConnectionError(MLFlowError):
    """The tracking server could not be reached."""


class MLFlowHTTPError(MLFlowError):
    """The tracking server answered with a non-success status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        error_code: str | None = None,
        endpoint: str | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.endpoint = endpoint
        super().__init__(self._format())

    def _format(self) -> str:
        code = f" {self.error_code}" if self.error_code else ""
        where = f" on {self.endpoint}" if self.endpoint else ""
        return f"HTTP {self.status_code}{code}{where}: {self.message}"


class ResourceDoesNotExist(MLFlowHTTPError):
    """Requested experiment, run, user or permission is unknown to the server."""


class ResourceAlreadyExists(MLFlowHTTPError):
    """A resource with the same identity already exists."""


class InvalidParameterValue(MLFlowHTTPError):
    """The server rejected one of the request arguments."""


class Unauthenticated(MLFlowHTTPError):
    """Missing or wrong credentials."""


class PermissionDenied(MLFlowHTTPError):
    """Credentials are valid but lack the required permission."""


_ERROR_CODES: dict[str, type[MLFlowHTTPError]] = {
    "RESOURCE_DOES_NOT_EXIST": ResourceDoesNotExist,
    "RESOURCE_ALREADY_EXISTS": ResourceAlreadyExists,
    "INVALID_PARAMETER_VALUE": InvalidParameterValue,
    "UNAUTHENTICATED": Unauthenticated,
    "PERMISSION_DENIED": PermissionDenied,
}

_STATUS_CODES: dict[int, type[MLFlowHTTPError]] = {
    400: InvalidParameterValue,
    401: Unauthenticated,
    403: PermissionDenied,
    404: ResourceDoesNotExist,
}


def error_from_response(response: httpx.Response, endpoint: str | None = None) -> MLFlowHTTPError:
    """Build the matching exception for an error response.

    MLflow reports failures as ``{"error_code": ..., "message": ...}``. The
    error code decides the exception class; the status code is used when the
    body is not JSON or carries an unknown code.
    """
    error_code = None
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        error_code = payload.get("error_code")
        message = payload.get("message") or response.text
    else:
        message = response.text or response.reason_phrase

    cls = _ERROR_CODES.get(error_code or "") or _STATUS_CODES.get(
        response.status_code, MLFlowHTTPError
    )
    return cls(
        message,
        status_code=response.status_code,
        error_code=error_code,
        endpoint=endpoint,
    )
