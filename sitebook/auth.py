"""Bearer token handling.

Tokens are issued by the account service and carry ``id``, ``role`` and
``name`` claims. This module only decodes them into a ``Principal``; it never
looks at passwords.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from sitebook.config import settings
from sitebook.errors import PermissionDeniedError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    id: str
    role: str
    display_name: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def create_access_token(user_id: str, role: str, name: str, minutes: int | None = None) -> str:
    expires = datetime.now(timezone.utc) + timedelta(
        minutes=minutes or settings.access_token_minutes
    )
    payload = {"id": user_id, "role": role, "name": name, "exp": expires}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Principal:
    payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    return Principal(
        id=str(payload["id"]),
        role=payload.get("role", "student"),
        display_name=payload.get("name") or "Unknown User",
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Principal:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token provided")
    try:
        return decode_token(credentials.credentials)
    except (jwt.PyJWTError, KeyError) as e:
        logger.info("rejected bearer token: %s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def require_admin(user: Principal = Depends(get_current_user)) -> Principal:
    if not user.is_admin:
        raise PermissionDeniedError()
    return user
