"""Token issuance and bearer-token authentication.

``issue_token`` signs the HS256 JWT handed out on login and ``verify_token``
checks one. Both are pure functions of their arguments. The FastAPI dependency
``get_current_identity`` wires them to the request:

1. Extracts the ``Authorization: Bearer <token>`` header.
2. Reads the signing secret from settings (unset means 500, not 401).
3. Verifies signature and expiry.
4. Hands the decoded ``Identity`` to the route as an argument.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Annotated, Any, Optional

import structlog
from fastapi import Depends, Request
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel

from errors import AuthError, ConfigError
from settings import Settings, get_settings

logger = structlog.get_logger(__name__)

ALGORITHM = "HS256"
DEFAULT_EXPIRES_SECONDS = 3600


class Identity(BaseModel):
    # Whatever the token carried under "id"; routes run it through parse_id
    user_id: Any = None


def issue_token(
    user_id: int, secret: Optional[str], expires_in: int = DEFAULT_EXPIRES_SECONDS
) -> str:
    if not secret:
        logger.error("Token signing secret is not configured")
        raise ConfigError()

    now = datetime.now(timezone.utc)
    claims = {
        "id": user_id,
        "iat": now,
        "exp": now + timedelta(seconds=expires_in),
    }
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def verify_token(token: str, secret: Optional[str]) -> Identity:
    """Verify an HS256 JWT and return the identity it carries.

    Raises ConfigError when no secret is configured and AuthError when the
    token is expired, malformed or signed with another key.
    """
    if not secret:
        logger.error("Token signing secret is not configured")
        raise ConfigError()

    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        logger.info("Rejected expired token")
        raise AuthError("Token expired.")
    except JWTError as exc:
        logger.warning("JWT verification failed", exc=str(exc))
        raise AuthError("Invalid token.")

    return Identity(user_id=payload.get("id"))


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the part after ``Bearer `` or None when there is nothing to use."""
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


# Helper to extract Authorization header (works with FastAPI DI)
def _get_authorization_header(request: Request) -> Optional[str]:
    return request.headers.get("Authorization")


# --- FastAPI dependency ---
def get_current_identity(
    authorization: Annotated[Optional[str], Depends(_get_authorization_header)],
    settings: Settings = Depends(get_settings),
) -> Identity:
    token = extract_bearer_token(authorization)
    if token is None:
        raise AuthError("Unauthorized.")

    return verify_token(token, settings.jwt_secret)
