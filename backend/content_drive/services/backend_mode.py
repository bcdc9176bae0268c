from __future__ import annotations

from enum import Enum
from typing import Optional

from ..config import Settings

_BEARER_PREFIX = "bearer "


class BackendMode(str, Enum):
    """Credential path used to service a single request."""

    SERVICE_ACCOUNT = "service_account"
    OAUTH = "oauth"
    MOCK = "mock"


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    value = authorization.strip()
    if not value.lower().startswith(_BEARER_PREFIX):
        return None
    token = value[len(_BEARER_PREFIX):].strip()
    return token or None


def probe_backend_mode(settings: Settings, authorization: Optional[str] = None) -> BackendMode:
    """Decide which backend serves the request.

    A delegated bearer token wins over server credentials because it scopes the
    call to the end user's own Drive access.
    """

    if extract_bearer_token(authorization):
        return BackendMode.OAUTH
    if settings.has_service_account:
        return BackendMode.SERVICE_ACCOUNT
    return BackendMode.MOCK
