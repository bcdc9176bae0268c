"""Map Drive failures onto error classes and decide when to serve simulation data."""
from __future__ import annotations

import json
from typing import Any, Optional

import httpx

from ...errors import DriveError, ErrorKind, error_for_kind
from ..backend_mode import BackendMode

_NOT_FOUND_MARKERS = ("notfound", "file not found")
_FALLBACK_KINDS = frozenset({ErrorKind.PERMISSION, ErrorKind.TRANSIENT, ErrorKind.PARSE})

PERMISSION_HINT = "フォルダの共有設定を確認してください。"
AUTH_HINT = "Googleアカウントで再ログインしてください。"
TRANSIENT_HINT = "しばらくしてから再度お試しください。"


def classify_http_failure(status_code: int, body: str = "") -> ErrorKind:
    """Classify a non-2xx Drive response.

    401 means the bearer token was rejected. 403 and 404, or a body that reports
    a missing file, mean the configured identity cannot see the resource.
    Everything else is treated as transient.
    """

    if status_code == 401:
        return ErrorKind.AUTH
    if status_code in (403, 404):
        return ErrorKind.PERMISSION
    lowered = (body or "").lower()
    if any(marker in lowered for marker in _NOT_FOUND_MARKERS):
        return ErrorKind.PERMISSION
    return ErrorKind.TRANSIENT


def _upstream_message(body: str) -> Optional[str]:
    try:
        payload: Any = json.loads(body)
    except ValueError:
        return None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(payload.get("error_description"), str):
            return payload["error_description"]
    return None


def failure_from_response(response: httpx.Response, *, operation: str) -> DriveError:
    body = response.text
    kind = classify_http_failure(response.status_code, body)
    upstream = _upstream_message(body) or body[:300]
    hints = {
        ErrorKind.AUTH: AUTH_HINT,
        ErrorKind.PERMISSION: PERMISSION_HINT,
        ErrorKind.TRANSIENT: TRANSIENT_HINT,
    }
    return error_for_kind(
        kind,
        f"{operation} failed with HTTP {response.status_code}: {upstream}",
        hint=hints.get(kind),
        details={"status": response.status_code},
    )


def failure_from_transport(exc: httpx.HTTPError, *, operation: str) -> DriveError:
    return error_for_kind(
        ErrorKind.TRANSIENT,
        f"{operation} failed: {exc.__class__.__name__}: {exc}",
        hint=TRANSIENT_HINT,
    )


def should_fall_back(mode: BackendMode, kind: ErrorKind) -> bool:
    """Return True when a failed live query may be answered from simulation data.

    Delegated-token requests never fall back: another user's fixture data must
    not stand in for the caller's own Drive.
    """

    if mode is BackendMode.OAUTH:
        return False
    return kind in _FALLBACK_KINDS


def permission_hint(mode: BackendMode, service_account_email: str) -> str:
    if mode is BackendMode.SERVICE_ACCOUNT and service_account_email:
        return f"サービスアカウント（{service_account_email}）にフォルダを共有してください。"
    if mode is BackendMode.OAUTH:
        return "ログイン中のGoogleアカウントにフォルダへのアクセス権があるか確認してください。"
    return PERMISSION_HINT
