from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from school_admin.core.context import set_auth_context
from school_admin.core.errors import Forbidden, Gone, InvalidToken, NotFound, Unauthenticated
from school_admin.core.logger import logger
from school_admin.core.permissions import has_permission
from school_admin.core.security import decode_access_token
from school_admin.db.session import get_db
from school_admin.models import User

# missing credentials are reported by the gate itself
security = HTTPBearer(auto_error=False)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Authorization token is required")
    return credentials.credentials


def _load_principal(db: Session, payload: dict) -> User:
    sub = payload.get("sub")
    if not sub:
        raise InvalidToken("Token has no subject")
    try:
        user_id = UUID(str(sub))
    except ValueError:
        raise InvalidToken("Token subject is not a valid id")

    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    if user.is_deleted:
        raise Gone("User has been deleted")
    if not user.is_active:
        raise Forbidden("User account is inactive")
    return user


def authorize(capability: Optional[str] = None):
    """
    Dependency factory guarding a route with ``capability``.

    Checks run in a fixed order: bearer token, token verification, subject,
    identity state, capability. On success the request context is populated
    and the loaded user is returned. ``None`` only requires authentication.
    """

    def dependency(
        token: str = Depends(get_bearer_token),
        db: Session = Depends(get_db),
    ) -> User:
        payload = decode_access_token(token)
        user = _load_principal(db, payload)

        if capability is not None and not has_permission(user.role, capability):
            logger.warning(
                f"PERMISSION DENIED | user_id={user.id} | role={user.role} | "
                f"capability={capability}"
            )
            raise Forbidden(f"Permission {capability} is required")

        set_auth_context(user)
        return user

    dependency.capability = capability
    return dependency


get_current_user = authorize(None)
