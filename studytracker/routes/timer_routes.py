from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from studytracker.auth import UserIdentity, get_current_user
from studytracker.dependencies import get_timer_registry
from studytracker.errors import PersistenceFailure
from studytracker.models.study_session import StudyType
from studytracker.services.session_service import SessionService
from studytracker.services.timer_engine import SessionDraft, TimerRegistry
from studytracker.supabase_rest import get_store

router = APIRouter(prefix="/api/v1/timer", tags=["Timer"])

class TimerStart(BaseModel):
    course_id: str
    study_type: StudyType = StudyType.VIDEO
    notes: Optional[str] = None
    module_id: Optional[str] = None
    resume_from_session_id: Optional[str] = None
    resume_from_duration_seconds: Optional[int] = None
    resume_from_start_time: Optional[datetime] = None

class ResumeSessionBody(BaseModel):
    notes: Optional[str] = None

def _transition(ok: bool, engine, noop_status: str) -> dict:
    return {"status": "success" if ok else noop_status, "data": engine.snapshot()}

@router.get("")
async def get_timer(user: UserIdentity = Depends(get_current_user),
                    registry: TimerRegistry = Depends(get_timer_registry)):
    return {"status": "success", "data": registry.for_user(user).snapshot()}

@router.post("/start")
async def start_timer(body: TimerStart, user: UserIdentity = Depends(get_current_user),
                      registry: TimerRegistry = Depends(get_timer_registry)):
    engine = registry.for_user(user)
    draft = SessionDraft(**body.model_dump())
    return _transition(engine.start(draft), engine, "already_running")

@router.post("/pause")
async def pause_timer(user: UserIdentity = Depends(get_current_user),
                      registry: TimerRegistry = Depends(get_timer_registry)):
    engine = registry.for_user(user)
    return _transition(engine.pause(), engine, "not_running")

@router.post("/resume")
async def resume_timer(user: UserIdentity = Depends(get_current_user),
                       registry: TimerRegistry = Depends(get_timer_registry)):
    engine = registry.for_user(user)
    return _transition(engine.resume(), engine, "not_paused")

@router.post("/reset")
async def reset_timer(user: UserIdentity = Depends(get_current_user),
                      registry: TimerRegistry = Depends(get_timer_registry)):
    engine = registry.for_user(user)
    engine.reset()
    return {"status": "success", "data": engine.snapshot()}

@router.post("/finish")
async def finish_timer(as_new: bool = False, user: UserIdentity = Depends(get_current_user),
                       registry: TimerRegistry = Depends(get_timer_registry)):
    """Save the running session. `as_new=true` stores a resumed session as a new record."""
    engine = registry.for_user(user)
    try:
        result = engine.finish(as_new=as_new)
    except PersistenceFailure as e:
        if e.status_code == 404:
            # The resumed record was deleted; the timer is kept until the user decides
            raise HTTPException(
                status_code=409,
                detail={"message": str(e), "retryable": False, "save_as_new": True},
            )
        # Timer state is untouched; the client can simply call /finish again
        raise HTTPException(
            status_code=503,
            detail={"message": f"Could not save the session: {e}", "retryable": True},
        )
    if result is None:
        return {"status": "not_running", "data": engine.snapshot()}
    return {"status": "success", "data": result.model_dump()}

@router.post("/resume-session/{session_id}")
async def resume_session(session_id: str, body: Optional[ResumeSessionBody] = None,
                         user: UserIdentity = Depends(get_current_user),
                         registry: TimerRegistry = Depends(get_timer_registry),
                         store=Depends(get_store)):
    """Start the timer as a continuation of a saved session; finishing it updates that record."""
    engine = registry.for_user(user)
    try:
        session = SessionService.get_session(store, user, session_id)
    except PersistenceFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")

    draft = SessionService.resume_draft(session, notes=body.notes if body else None)
    return _transition(engine.start(draft), engine, "already_running")
