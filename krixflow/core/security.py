# krixflow/core/security.py
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from krixflow.core.config import settings
from krixflow.core.errors import AuthenticationError, PermissionDeniedError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)

ACCESS = "access"
REFRESH = "refresh"


@dataclass
class TokenPayload:
    user_id: str
    email: str
    role: str


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _encode(payload: TokenPayload, token_type: str, secret: str, expires_delta: timedelta) -> str:
    to_encode = {
        "sub": payload.user_id,
        "email": payload.email,
        "role": payload.role,
        "type": token_type,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(to_encode, secret, algorithm=settings.algorithm)


def create_access_token(payload: TokenPayload, expires_delta: Optional[timedelta] = None) -> str:
    expires_delta = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    return _encode(payload, ACCESS, settings.secret_key, expires_delta)


def create_refresh_token(payload: TokenPayload, expires_delta: Optional[timedelta] = None) -> str:
    expires_delta = expires_delta or timedelta(days=settings.refresh_token_expire_days)
    return _encode(payload, REFRESH, settings.refresh_secret_key, expires_delta)


def create_tokens(payload: TokenPayload) -> dict:
    return {
        "token": create_access_token(payload),
        "refresh_token": create_refresh_token(payload),
    }


def _decode(token: str, token_type: str, secret: str) -> Optional[TokenPayload]:
    try:
        claims = jwt.decode(token, secret, algorithms=[settings.algorithm])
    except JWTError:
        return None
    if claims.get("type") != token_type or not claims.get("sub"):
        return None
    return TokenPayload(
        user_id=claims["sub"],
        email=claims.get("email", ""),
        role=claims.get("role", ""),
    )


def verify_access_token(token: str) -> Optional[TokenPayload]:
    return _decode(token, ACCESS, settings.secret_key)


def verify_refresh_token(token: str) -> Optional[TokenPayload]:
    return _decode(token, REFRESH, settings.refresh_secret_key)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TokenPayload:
    """Resolve the bearer token on the request into its payload."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("No token provided")
    payload = verify_access_token(credentials.credentials)
    if payload is None:
        raise AuthenticationError("Invalid or expired token")
    return payload


def require_roles(*roles):
    allowed = {getattr(r, "value", r) for r in roles}

    async def checker(user: TokenPayload = Depends(get_current_user)) -> TokenPayload:
        if user.role not in allowed:
            raise PermissionDeniedError("You do not have access to this resource")
        return user

    return checker
