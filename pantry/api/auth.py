"""
Bearer token authentication.

The token's subject is the caller identity handed to the core as an opaque
string; no user records are consulted.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from pantry.config.config_manager import ConfigManager, get_config_manager
from pantry.exceptions import UnauthenticatedError

security = HTTPBearer(auto_error=False)


def create_access_token(
    user_id: str,
    expires_minutes: Optional[int] = None,
    config: Optional[ConfigManager] = None,
) -> str:
    """
    Issue a signed token for a caller.

    Args:
        user_id: Caller identity (becomes the "sub" claim)
        expires_minutes: Lifetime; None uses auth.token_expire_minutes,
            0 issues a token without expiry
        config: Configuration holding the signing secret

    Returns:
        Encoded token
    """
    config = config or get_config_manager()
    if expires_minutes is None:
        expires_minutes = config.get("auth.token_expire_minutes", 720)

    now = datetime.now(timezone.utc)
    payload = {"sub": user_id, "iat": now}
    if expires_minutes:
        payload["exp"] = now + timedelta(minutes=expires_minutes)

    return jwt.encode(
        payload,
        config.get_auth_secret(),
        algorithm=config.get("auth.algorithm", "HS256"),
    )


def decode_access_token(token: str, config: Optional[ConfigManager] = None) -> str:
    """
    Verify a token and return its caller identity.

    Raises:
        UnauthenticatedError: Token is invalid, expired or has no subject
    """
    config = config or get_config_manager()
    try:
        payload = jwt.decode(
            token,
            config.get_auth_secret(),
            algorithms=[config.get("auth.algorithm", "HS256")],
        )
    except JWTError as e:
        raise UnauthenticatedError(f"Invalid token: {e}") from e

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthenticatedError("Invalid token structure")
    return user_id


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """FastAPI dependency resolving the authenticated caller identity."""
    if credentials is None:
        raise UnauthenticatedError("Unauthorized")
    return decode_access_token(credentials.credentials, request.app.state.config)
