"""
Shared route dependencies: the authenticated identity.
"""
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
from tripboard.core.exceptions import AuthenticationError, ForbiddenError
from tripboard.core.security import decode_access_token
from tripboard.db.session import get_db
from tripboard.models.user import User, UserRole

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the bearer token to an active user."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if not payload or "sub" not in payload:
        raise AuthenticationError("Could not validate credentials")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise AuthenticationError("Could not validate credentials")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise AuthenticationError("Could not validate credentials")
    if not user.is_active:
        raise AuthenticationError("User account is inactive")

    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Allow only admins through."""
    if current_user.role != UserRole.ADMIN:
        raise ForbiddenError("Admin access required")
    return current_user
