from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..database import get_db
from .. import crud
from ..models.user import User
from ..services.booking_lifecycle import BookingManager, booking_manager
from ..services.booking_policy import Principal
from .security import JWTError, bearer_scheme, decode_access_token


def get_current_user(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    token = None
    if creds and creds.scheme.lower() == "bearer":
        token = creds.credentials
    token = token or request.cookies.get("access_token")
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = decode_access_token(token)
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise credentials_exception
    user = crud.directory.get_user(db, user_id)
    if user is None:
        raise credentials_exception
    return user


def get_current_principal(current_user: User = Depends(get_current_user)) -> Principal:
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    # The stored role is authoritative, never the token's copy.
    return Principal(id=current_user.id, role=current_user.role)


def get_booking_manager() -> BookingManager:
    return booking_manager
