from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import httpx

from ..config import Settings
from ..errors import ConfigurationError, InvalidGrant, ParseError, UpstreamError

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_ENDPOINT = "https://www.googleapis.com/oauth2/v2/userinfo"
# Redirect URI used by Google Identity Services popup code flows.
POPUP_REDIRECT_URI = "postmessage"
INVALID_GRANT_ERROR = "invalid_grant"


@dataclass(frozen=True)
class TokenSet:
    """OAuth tokens handed back to the caller; the server never stores them."""

    access_token: str
    expires_in: int
    token_type: str
    refresh_token: Optional[str] = None
    scope: Optional[str] = None
    id_token: Optional[str] = None

    @classmethod
    def from_payload(
        cls, payload: Dict[str, Any], *, fallback_refresh_token: Optional[str] = None
    ) -> "TokenSet":
        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise ParseError("Token response is missing access_token.")
        try:
            expires_in = int(payload.get("expires_in", 0))
        except (TypeError, ValueError) as exc:
            raise ParseError("Token response carries an invalid expires_in.") from exc

        return cls(
            access_token=access_token,
            expires_in=expires_in,
            token_type=str(payload.get("token_type") or "Bearer"),
            refresh_token=payload.get("refresh_token") or fallback_refresh_token,
            scope=payload.get("scope"),
            id_token=payload.get("id_token"),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "access_token": self.access_token,
            "expires_in": self.expires_in,
            "token_type": self.token_type,
        }
        if self.refresh_token:
            payload["refresh_token"] = self.refresh_token
        if self.scope:
            payload["scope"] = self.scope
        if self.id_token:
            payload["id_token"] = self.id_token
        return payload


@dataclass(frozen=True)
class UserIdentity:
    email: Optional[str]
    name: Optional[str]
    picture: Optional[str]

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"email": self.email, "name": self.name, "picture": self.picture}


class GoogleOAuthService:
    """Exchange and refresh delegated Google OAuth tokens.

    Every operation is a single call to the authorization server. Nothing is
    cached or persisted; the caller owns the returned tokens.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def ensure_credentials(self) -> None:
        if not self._settings.has_oauth_credentials:
            raise ConfigurationError(
                "Google OAuth is not configured.",
                hint="GOOGLE_CLIENT_ID と GOOGLE_CLIENT_SECRET を設定してください。",
            )

    def config_status(self) -> Dict[str, Any]:
        configured = self._settings.has_oauth_credentials
        return {
            "configured": configured,
            "clientId": self._settings.client_id or None,
            "message": (
                "OAuth is configured"
                if configured
                else "GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET are not set"
            ),
        }

    def resolve_redirect_uri(self, redirect_uri: Optional[str]) -> str:
        return redirect_uri or self._settings.redirect_uri or POPUP_REDIRECT_URI

    async def _post_token_endpoint(self, data: Dict[str, str], *, operation: str) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
                response = await client.post(GOOGLE_TOKEN_ENDPOINT, data=data)
        except httpx.HTTPError as exc:
            logger.error("Google %s request failed: %s", operation, exc)
            raise UpstreamError(f"Google {operation} request failed.") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            logger.error("Google %s failed: %s", operation, response.text[:300])
            if isinstance(payload, dict) and payload.get("error") == INVALID_GRANT_ERROR:
                description = payload.get("error_description") or payload["error"]
                raise InvalidGrant(
                    str(description),
                    hint="Googleアカウントで再度ログインしてください。",
                    details={"error": payload["error"]},
                )
            raise UpstreamError(
                f"Google {operation} failed with HTTP {response.status_code}.",
                details={"status": response.status_code},
            )

        if not isinstance(payload, dict):
            logger.error("Google %s returned a malformed body: %s", operation, response.text[:300])
            raise ParseError(f"Google {operation} returned a malformed body.")
        return payload

    async def exchange_code(
        self, code: str, redirect_uri: Optional[str] = None
    ) -> Tuple[TokenSet, UserIdentity]:
        self.ensure_credentials()
        data = {
            "code": code,
            "client_id": self._settings.client_id,
            "client_secret": self._settings.client_secret,
            "redirect_uri": self.resolve_redirect_uri(redirect_uri),
            "grant_type": "authorization_code",
        }
        payload = await self._post_token_endpoint(data, operation="token exchange")
        tokens = TokenSet.from_payload(payload)
        identity = await self.fetch_userinfo(tokens.access_token)
        return tokens, identity

    async def refresh(self, refresh_token: str) -> TokenSet:
        """Return fresh tokens; the input refresh token is kept when Google omits one."""

        self.ensure_credentials()
        data = {
            "client_id": self._settings.client_id,
            "client_secret": self._settings.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }
        payload = await self._post_token_endpoint(data, operation="token refresh")
        return TokenSet.from_payload(payload, fallback_refresh_token=refresh_token)

    async def fetch_userinfo(self, access_token: str) -> UserIdentity:
        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
                response = await client.get(
                    GOOGLE_USERINFO_ENDPOINT,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
        except httpx.HTTPError as exc:
            logger.error("Failed to fetch Google user info: %s", exc)
            raise UpstreamError("Google ユーザー情報を取得できませんでした。") from exc

        if response.is_error:
            logger.error("Failed to fetch Google user info: %s", response.text[:300])
            raise UpstreamError("Google ユーザー情報を取得できませんでした。")

        try:
            data = response.json()
        except ValueError as exc:
            raise ParseError("Google ユーザー情報を確認できませんでした。") from exc
        if not isinstance(data, dict):
            raise ParseError("Google ユーザー情報を確認できませんでした。")

        return UserIdentity(
            email=data.get("email"),
            name=data.get("name"),
            picture=data.get("picture"),
        )
