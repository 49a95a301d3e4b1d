# src/core/auth_dependencies.py
from uuid import UUID
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
from src.core.config import Settings
from src.core.database import get_app_settings
from src.core.security import SecurityUtils
from src.schemas.security import CurrentAccount



security = HTTPBearer(auto_error=False)


def get_current_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_app_settings)
) -> CurrentAccount:
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required"
        )

    payload = SecurityUtils.verify_access_token(settings, credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token"
        )

    try:
        return CurrentAccount(
            user_id=UUID(payload["user_id"]),
            organization_id=UUID(payload["organization_id"]),
            jti=payload.get("jti"),
        )
    except (KeyError, ValueError, TypeError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token is missing account claims"
        )
