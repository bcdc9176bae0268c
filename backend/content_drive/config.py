from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlparse

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application configuration loaded from environment variables."""

    client_id: str
    client_secret: str
    redirect_uri: str
    frontend_redirect_url: str
    service_account_email: str
    private_key: str

    @property
    def frontend_origin(self) -> str:
        parsed = urlparse(self.frontend_redirect_url)
        if not parsed.scheme:
            return "*"
        return f"{parsed.scheme}://{parsed.netloc}"

    @property
    def has_oauth_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)

    @property
    def has_service_account(self) -> bool:
        return bool(self.service_account_email and self.private_key)


def _normalize_private_key(raw: str) -> str:
    # Keys pasted into .env files usually carry literal "\n" sequences.
    return raw.replace("\\n", "\n").strip()


def load_settings() -> Settings:
    return Settings(
        client_id=os.getenv("GOOGLE_CLIENT_ID", ""),
        client_secret=os.getenv("GOOGLE_CLIENT_SECRET", ""),
        redirect_uri=os.getenv("GOOGLE_REDIRECT_URI", ""),
        frontend_redirect_url=os.getenv("FRONTEND_REDIRECT_URL", "http://localhost:3000/"),
        service_account_email=os.getenv("GOOGLE_SERVICE_ACCOUNT_EMAIL", "").strip(),
        private_key=_normalize_private_key(os.getenv("GOOGLE_PRIVATE_KEY", "")),
    )
