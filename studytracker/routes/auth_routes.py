"""
Auth routes backed by Supabase Auth.
Sign-up and sign-in hand back the Supabase session; every other route
expects its access token as a Bearer header.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import Optional

from studytracker.auth import UserIdentity, get_current_user, get_access_token
from studytracker.dependencies import get_timer_registry
from studytracker.services.timer_engine import TimerRegistry
from studytracker.supabase_client import sign_up_user, sign_in_user, sign_out_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


# ── Pydantic schemas ──────────────────────────────────────────────
class SignUpRequest(BaseModel):
    email: str
    password: str
    display_name: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


def _session_payload(resp) -> dict:
    session = getattr(resp, "session", None)
    user = getattr(resp, "user", None)
    return {
        "access_token": session.access_token if session else None,
        "refresh_token": session.refresh_token if session else None,
        "user": {"id": str(user.id), "email": user.email} if user else None,
    }


# ── Routes ────────────────────────────────────────────────────────
@router.post("/signup")
async def signup(body: SignUpRequest):
    try:
        metadata = {"display_name": body.display_name} if body.display_name else None
        resp = await sign_up_user(body.email, body.password, metadata)
        return {"status": "success", "data": _session_payload(resp)}
    except Exception as e:
        logger.warning(f"Sign-up failed for {body.email}: {e}")
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/login")
async def login(body: LoginRequest):
    try:
        resp = await sign_in_user(body.email, body.password)
    except Exception as e:
        logger.info(f"Login failed for {body.email}: {e}")
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return {"status": "success", "data": _session_payload(resp)}


@router.post("/logout")
async def logout(user: UserIdentity = Depends(get_current_user), token: str = Depends(get_access_token),
                 registry: TimerRegistry = Depends(get_timer_registry)):
    """Revoke the session. A running timer stays saved and is picked up again at the next login."""
    try:
        await sign_out_user(token)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    registry.forget(user.id)
    return {"status": "success", "message": "Logged out"}


@router.get("/me")
async def me(user: UserIdentity = Depends(get_current_user)):
    return user.model_dump()
