# tuitionhub/core/dependencies.py
# FastAPI dependency functions for authentication and role gates
#
# Key rules:
#   1. The user row is loaded live on every request -- role/status changes by
#      an admin take effect immediately, even for previously issued tokens
#   2. Blocked users are rejected here as if the token were invalid
#   3. Public GET endpoints use get_optional_user() -- None for anonymous
#   4. Ownership checks live in the services via core/permissions.py

from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from tuitionhub.core.exceptions import Forbidden, Unauthenticated
from tuitionhub.core.security import decode_token
from tuitionhub.db.session import get_db
from tuitionhub.models.user import User

# Bearer token extractor -- auto_error=False so we can shape 401 ourselves
bearer_scheme = HTTPBearer(auto_error=False)


# ── Token Extraction ──────────────────────────────────────────────────────────

def _extract_user_from_token(
    credentials: Optional[HTTPAuthorizationCredentials],
    db: Session,
) -> Optional[User]:
    """
    Decode the Bearer token and load the user from DB.
    Returns None if no token, invalid token, user missing or blocked.
    """
    if not credentials:
        return None

    payload = decode_token(credentials.credentials)
    if not payload or payload.get("type") != "access":
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        return None

    user = db.query(User).filter(User.id == user_uuid).first()
    if not user or user.is_blocked:
        return None
    return user


# ── Auth Dependencies ─────────────────────────────────────────────────────────

def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Returns the authenticated user if a valid token is present.
    Returns None for anonymous requests -- does NOT raise 401.

    Use for: tuition detail (owner/admin may see unapproved postings).
    """
    return _extract_user_from_token(credentials, db)


def require_login(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Requires a valid JWT token. Raises 401 if not authenticated."""
    user = _extract_user_from_token(credentials, db)
    if not user:
        raise Unauthenticated("Authentication required. Please log in.")
    return user


def require_roles(*roles: str):
    """
    Build a dependency that requires one of `roles`.

    Usage:
        @router.post("/", dependencies=[Depends(require_roles("student"))])
    """
    label = " or ".join(roles)

    def dependency(user: User = Depends(require_login)) -> User:
        if user.role not in roles:
            raise Forbidden(f"{label.capitalize()} access required.")
        return user

    return dependency


# Shortcuts used by the routers
require_student = require_roles("student")
require_tutor = require_roles("tutor")
require_admin = require_roles("admin")
