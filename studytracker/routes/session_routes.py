from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from studytracker.auth import UserIdentity, get_current_user
from studytracker.dependencies import get_cache
from studytracker.models.study_session import StudyType
from studytracker.services.cache_service import QueryCache, DASHBOARD_STATS, DASHBOARD_CHARTS
from studytracker.services.session_service import SessionService, SessionFilters
from studytracker.supabase_rest import get_store

router = APIRouter(prefix="/api/v1/sessions", tags=["Sessions"])

@router.get("")
async def list_sessions(
    course_id: Optional[str] = None,
    study_type: Optional[StudyType] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user: UserIdentity = Depends(get_current_user),
    store=Depends(get_store),
):
    try:
        filters = SessionFilters(
            course_id=course_id,
            study_type=study_type.value if study_type else None,
            start_date=start_date.isoformat() if start_date else None,
            # Inclusive of the whole end day
            end_date=f"{end_date.isoformat()}T23:59:59.999" if end_date else None,
        )
        sessions = SessionService.list_sessions(store, user, filters)
        return [s.model_dump(mode="json") for s in sessions]
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

@router.delete("/{session_id}")
async def delete_session(session_id: str, user: UserIdentity = Depends(get_current_user),
                         store=Depends(get_store), cache: QueryCache = Depends(get_cache)):
    try:
        deleted = SessionService.delete_session(store, user, session_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Session not found")

    cache.invalidate(DASHBOARD_STATS, user.id)
    cache.invalidate(DASHBOARD_CHARTS, user.id)
    return {"status": "success", "message": "Session deleted"}
