"""
JWT Token Authentication

The token subject ("sub") is the principal's user id; roles are not carried
in the token but looked up per request by the authorization gate.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from common.config import get_config
from modules.talent.authorization import Principal, Unauthorized

# auto_error=False: a missing header must surface as Unauthorized (401), not 403
security = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token"""
    auth = get_config().auth
    to_encode = {k: v for k, v in data.items() if v is not None}
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=auth.token_expire_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, auth.jwt_secret, algorithm=auth.algorithm)


def verify_token(token: str) -> Principal:
    """Verify and decode a JWT token"""
    auth = get_config().auth
    try:
        payload = jwt.decode(token, auth.jwt_secret, algorithms=[auth.algorithm])
    except JWTError:
        raise Unauthorized("Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Invalid token")
    return Principal(user_id=str(user_id), email=payload.get("email"))


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Principal:
    """Resolve the calling principal from the bearer token"""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Missing bearer token")
    return verify_token(credentials.credentials)
