from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from studytracker.auth import UserIdentity, get_current_user
from studytracker.dependencies import get_cache
from studytracker.services.cache_service import QueryCache, DASHBOARD_STATS
from studytracker.services.profile_service import ProfileService
from studytracker.supabase_rest import get_store

router = APIRouter(prefix="/api/v1/profile", tags=["Profile"])

class ProfileUpdate(BaseModel):
    display_name: Optional[str] = None
    daily_goal_minutes: Optional[int] = Field(default=None, ge=1, le=1440)

@router.get("")
async def get_profile(user: UserIdentity = Depends(get_current_user), store=Depends(get_store)):
    try:
        return ProfileService.get_profile(store, user).model_dump()
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

@router.put("")
async def update_profile(body: ProfileUpdate, user: UserIdentity = Depends(get_current_user),
                         store=Depends(get_store), cache: QueryCache = Depends(get_cache)):
    try:
        profile = ProfileService.update_profile(store, user, body.model_dump(exclude_unset=True))
        # Goal progress and streak depend on the goal
        cache.invalidate(DASHBOARD_STATS, user.id)
        return {"status": "success", "data": profile.model_dump()}
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
