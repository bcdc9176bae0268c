from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..dependencies import get_oauth_service
from ..services.oauth import GoogleOAuthService

router = APIRouter()


class CodeExchangeRequest(BaseModel):
    code: str = Field(..., min_length=1, description="Google から受け取った認可コード")
    redirect_uri: Optional[str] = Field(None, description="認可リクエストで使用したリダイレクトURI")


class TokenRefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


@router.get("/auth/config")
def read_oauth_config(
    oauth_service: GoogleOAuthService = Depends(get_oauth_service),
) -> Dict[str, Any]:
    return oauth_service.config_status()


@router.post("/auth/exchange")
async def exchange_code(
    payload: CodeExchangeRequest,
    oauth_service: GoogleOAuthService = Depends(get_oauth_service),
) -> Dict[str, Any]:
    tokens, identity = await oauth_service.exchange_code(payload.code, payload.redirect_uri)
    response = tokens.to_dict()
    response["user"] = identity.to_dict()
    return response


@router.post("/auth/refresh")
async def refresh_tokens(
    payload: TokenRefreshRequest,
    oauth_service: GoogleOAuthService = Depends(get_oauth_service),
) -> Dict[str, Any]:
    tokens = await oauth_service.refresh(payload.refresh_token)
    return tokens.to_dict()
