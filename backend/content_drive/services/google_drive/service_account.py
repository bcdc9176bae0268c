"""Service-account bearer tokens for server-held Drive access."""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import httpx
from google.auth import crypt, jwt

from ...config import Settings
from ...errors import AuthError, ConfigurationError, ParseError, TransientError
from ..oauth import GOOGLE_TOKEN_ENDPOINT

logger = logging.getLogger(__name__)

DRIVE_READONLY_SCOPE = "https://www.googleapis.com/auth/drive.readonly"
JWT_BEARER_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME_SECONDS = 3600


class ServiceAccountCredentials:
    """Mint Drive access tokens by signing a JWT assertion with the service key.

    A token is minted for every request; nothing is cached between requests.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    @property
    def email(self) -> str:
        return self._settings.service_account_email

    def build_assertion(self, *, issued_at: Optional[int] = None) -> str:
        if not self._settings.has_service_account:
            raise ConfigurationError(
                "Service account credentials are not configured.",
                hint="GOOGLE_SERVICE_ACCOUNT_EMAIL と GOOGLE_PRIVATE_KEY を設定してください。",
            )

        try:
            signer = crypt.RSASigner.from_string(self._settings.private_key)
        except (ValueError, TypeError) as exc:
            logger.error("GOOGLE_PRIVATE_KEY could not be parsed: %s", exc)
            raise ConfigurationError(
                "GOOGLE_PRIVATE_KEY is not a valid PEM private key.",
                hint="サービスアカウントのJSONキーから private_key をそのまま設定してください。",
            ) from exc

        now = int(time.time()) if issued_at is None else issued_at
        payload: Dict[str, Any] = {
            "iss": self.email,
            "scope": DRIVE_READONLY_SCOPE,
            "aud": GOOGLE_TOKEN_ENDPOINT,
            "iat": now,
            "exp": now + ASSERTION_LIFETIME_SECONDS,
        }
        return jwt.encode(signer, payload).decode("utf-8")

    async def fetch_access_token(self) -> str:
        assertion = self.build_assertion()
        data = {"grant_type": JWT_BEARER_GRANT_TYPE, "assertion": assertion}

        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
                response = await client.post(GOOGLE_TOKEN_ENDPOINT, data=data)
        except httpx.HTTPError as exc:
            logger.error("Service account token request failed: %s", exc)
            raise TransientError("Service account token request failed.") from exc

        if response.status_code in (400, 401):
            logger.error("Service account token rejected: %s", response.text[:300])
            raise AuthError(
                "Google rejected the service account credentials.",
                hint="GOOGLE_SERVICE_ACCOUNT_EMAIL と GOOGLE_PRIVATE_KEY の組み合わせを確認してください。",
                details={"status": response.status_code},
            )
        if response.is_error:
            logger.error("Service account token request failed: %s", response.text[:300])
            raise TransientError(
                f"Service account token request failed with HTTP {response.status_code}.",
                details={"status": response.status_code},
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ParseError("Service account token response is not JSON.") from exc

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(access_token, str) or not access_token:
            logger.error("Service account token response missing access_token: %s", payload)
            raise ParseError("Service account token response is missing access_token.")
        return access_token
