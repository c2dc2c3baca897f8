# backend/studiobook/api/security.py
#
# Tokens are minted by the external credential service; this module only
# verifies them. create_access_token exists for tooling and tests and uses
# the same secret, algorithm and claims.

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi.security import HTTPBearer
from jose import JWTError, jwt

from ..core.config import settings
from ..models.user import UserRole

bearer_scheme = HTTPBearer(auto_error=False)

__all__ = ["JWTError", "bearer_scheme", "create_access_token", "decode_access_token"]


def create_access_token(
    user_id: int,
    role: UserRole | str | None = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode: dict = {"sub": str(user_id), "exp": expire}
    if role is not None:
        to_encode["role"] = getattr(role, "value", role)
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Return verified claims or raise ``JWTError``."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
