import logging

from fastapi import Request, HTTPException, status
from jose import jwt, JWTError
from pydantic import BaseModel

from studytracker.config import SUPABASE_JWT_SECRET, SUPABASE_JWT_AUDIENCE, JWT_ALGORITHM
from studytracker.supabase_client import get_user_from_token

logger = logging.getLogger(__name__)


class UserIdentity(BaseModel):
    """The signed-in user, passed explicitly to every operation that needs one."""
    id: str
    email: str | None = None


def verify_token(token: str) -> dict | None:
    """Decode and verify a Supabase access token. Returns the payload or None on failure."""
    try:
        payload = jwt.decode(
            token,
            SUPABASE_JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            audience=SUPABASE_JWT_AUDIENCE,
        )
        return payload
    except JWTError:
        return None


def resolve_identity(token: str) -> UserIdentity | None:
    """
    Map an access token to a UserIdentity.
    With SUPABASE_JWT_SECRET set the token is checked locally; otherwise
    Supabase Auth is asked directly.
    """
    if SUPABASE_JWT_SECRET:
        payload = verify_token(token)
        if payload is None or not payload.get("sub"):
            return None
        return UserIdentity(id=payload["sub"], email=payload.get("email"))

    try:
        resp = get_user_from_token(token)
    except Exception as e:
        logger.warning(f"Supabase rejected access token: {e}")
        return None
    user = getattr(resp, "user", None)
    if user is None:
        return None
    return UserIdentity(id=str(user.id), email=user.email)


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1]


async def get_current_user(request: Request) -> UserIdentity:
    """
    FastAPI dependency — extracts the Bearer token from the Authorization
    header, verifies it, and returns the caller's identity.
    Raises HTTP 401 if the token is missing or invalid.
    """
    token = _bearer_token(request)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    identity = resolve_identity(token)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


async def get_optional_user(request: Request) -> UserIdentity | None:
    """Like get_current_user, but anonymous callers get None instead of a 401."""
    token = _bearer_token(request)
    if token is None:
        return None
    return resolve_identity(token)


async def get_access_token(request: Request) -> str:
    token = _bearer_token(request)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token
