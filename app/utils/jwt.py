"""JWT utilities for admin authentication."""

from datetime import datetime, timedelta, timezone

import jwt
from pydantic import BaseModel

from app.config import get_settings

ADMIN_SUBJECT = "admin"
ADMIN_TOKEN_TYPE = "admin_access"


class TokenPayload(BaseModel):
    """JWT token payload."""

    sub: str  # Subject
    exp: datetime  # Expiration time
    iat: datetime  # Issued at
    type: str = ADMIN_TOKEN_TYPE  # Token type


def create_admin_access_token() -> str:
    """Create a JWT access token for admin."""
    settings = get_settings()

    now = datetime.now(timezone.utc)
    expires = now + timedelta(minutes=settings.jwt_access_token_expire_minutes)

    payload = {
        "sub": ADMIN_SUBJECT,
        "exp": expires,
        "iat": now,
        "type": ADMIN_TOKEN_TYPE,
    }

    token = jwt.encode(
        payload,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return token


def decode_access_token(token: str) -> TokenPayload | None:
    """Decode and validate a JWT access token.

    Returns TokenPayload if valid, None if invalid or expired.
    """
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
        return TokenPayload(
            sub=payload["sub"],
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            type=payload.get("type", ADMIN_TOKEN_TYPE),
        )
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def is_admin_token(payload: TokenPayload) -> bool:
    """Check if a token payload is an admin token."""
    return payload.type == ADMIN_TOKEN_TYPE and payload.sub == ADMIN_SUBJECT
