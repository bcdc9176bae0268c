"""Error taxonomy for Drive folder resolution.

Every error carries a machine-readable ``kind``, the HTTP status used when it
reaches a caller, and an optional remediation ``hint``.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    INVALID_REFERENCE = "invalid_reference"
    CONFIGURATION = "configuration_error"
    AUTH = "auth_error"
    PERMISSION = "permission_error"
    TRANSIENT = "transient_error"
    PARSE = "parse_error"
    INVALID_GRANT = "invalid_grant"
    UPSTREAM = "upstream_error"


class DriveError(Exception):
    """Base class for every failure surfaced by the resolution subsystem."""

    kind: ErrorKind = ErrorKind.TRANSIENT
    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        hint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "error": self.kind.value,
            "message": self.message,
        }
        if self.hint:
            payload["hint"] = self.hint
        return payload


class InvalidReference(DriveError):
    """The caller supplied a folder or file reference that cannot be parsed."""

    kind = ErrorKind.INVALID_REFERENCE
    status_code = 400


class ConfigurationError(DriveError):
    """The server lacks the secrets required for the requested operation."""

    kind = ErrorKind.CONFIGURATION
    status_code = 503


class AuthError(DriveError):
    """A bearer token was rejected or has expired."""

    kind = ErrorKind.AUTH
    status_code = 401


class DrivePermissionError(DriveError):
    """Drive denied access to the resource, or reports it does not exist."""

    kind = ErrorKind.PERMISSION
    status_code = 403


class TransientError(DriveError):
    """Network failure, 5xx, or any other unclassified non-2xx response."""

    kind = ErrorKind.TRANSIENT
    status_code = 502


class ParseError(DriveError):
    """Drive answered with a body of an unexpected shape."""

    kind = ErrorKind.PARSE
    status_code = 502


class InvalidGrant(DriveError):
    """The authorization server rejected a code or refresh token."""

    kind = ErrorKind.INVALID_GRANT
    status_code = 400


class UpstreamError(DriveError):
    """The authorization server failed for a reason other than the grant."""

    kind = ErrorKind.UPSTREAM
    status_code = 502


_ERRORS_BY_KIND = {
    cls.kind: cls
    for cls in (
        InvalidReference,
        ConfigurationError,
        AuthError,
        DrivePermissionError,
        TransientError,
        ParseError,
        InvalidGrant,
        UpstreamError,
    )
}


def error_for_kind(
    kind: ErrorKind,
    message: str,
    *,
    hint: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> DriveError:
    return _ERRORS_BY_KIND[kind](message, hint=hint, details=details)
