import os
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "authenticated")
JWT_ALGORITHMS = ["HS256"]

# Get logger
logger = logging.getLogger(__name__)

if not JWT_SECRET:
    logger.warning("SUPABASE_JWT_SECRET is not set. Auth will not work correctly.")

# Security scheme
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthenticatedUser:
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None


def decode_token(token: str, secret: Optional[str] = None) -> AuthenticatedUser:
    """
    Verify a bearer token and return the user it was issued to.
    Raises HTTPException(401) when the token is invalid or expired.
    """
    secret = secret or JWT_SECRET
    if not secret:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    try:
        claims = jwt.decode(token, secret, algorithms=JWT_ALGORITHMS, audience=JWT_AUDIENCE)
    except JWTError as e:
        logger.warning(f"JWT verify error: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user_id = claims.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    metadata = claims.get("user_metadata") or {}
    return AuthenticatedUser(
        id=user_id,
        email=claims.get("email"),
        full_name=metadata.get("full_name"),
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> AuthenticatedUser:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    return decode_token(credentials.credentials)
