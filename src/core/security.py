# src/core/security.py
from datetime import datetime, timezone, timedelta
from typing import Dict, Any, Optional
import uuid
from jose import JWTError, jwt
import logging

from src.core.config import Settings


logger = logging.getLogger(__name__)


class SecurityUtils:
    """
    Token helpers. Signing material always comes from the Settings instance
    handed in by the caller.
    """

    # ---------------- JWT ----------------
    @staticmethod
    def create_access_token(
        settings: Settings,
        data: Dict[str, Any],
        expires_delta: Optional[timedelta] = None,
    ) -> tuple[str, datetime, str]:
        to_encode = data.copy()
        jti = str(uuid.uuid4())
        expire = datetime.now(timezone.utc) + (
            expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        )
        to_encode.update({"exp": expire, "iat": datetime.now(timezone.utc), "jti": jti, "type": "access"})
        token = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
        return token, expire, jti

    @staticmethod
    def verify_access_token(settings: Settings, token: str) -> Optional[Dict[str, Any]]:
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
            if payload.get("type") != "access": return None
            return payload
        except JWTError:
            logger.debug("Rejected access token")
            return None
