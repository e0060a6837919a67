from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from studytracker.auth import UserIdentity, get_current_user
from studytracker.clock import local_zone
from studytracker.dependencies import get_cache
from studytracker.services.cache_service import QueryCache, DASHBOARD_STATS, DASHBOARD_CHARTS
from studytracker.services.chart_service import ViewMode, GroupBy, load_charts
from studytracker.services.stats_service import StatsService
from studytracker.supabase_rest import get_store

router = APIRouter(prefix="/api/v1/dashboard", tags=["Dashboard"])

@router.get("/stats")
async def dashboard_stats(user: UserIdentity = Depends(get_current_user),
                          store=Depends(get_store), cache: QueryCache = Depends(get_cache)):
    try:
        tz = local_zone()
        today = datetime.now(tz).date().isoformat()
        stats = cache.get_or_load(
            DASHBOARD_STATS, user.id, (today,),
            lambda: StatsService.get_dashboard_stats(store, user, tz=tz),
        )
        return {"status": "success", "data": stats.model_dump()}
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

@router.get("/charts")
async def dashboard_charts(
    view_mode: ViewMode = ViewMode.WEEK,
    reference_date: Optional[date] = None,
    group_by: GroupBy = GroupBy.STUDY_TYPE,
    user: UserIdentity = Depends(get_current_user),
    store=Depends(get_store),
    cache: QueryCache = Depends(get_cache),
):
    """Timeline, distribution and ranking for the week/month/year around reference_date."""
    try:
        tz = local_zone()
        reference_date = reference_date or datetime.now(tz).date()
        charts = cache.get_or_load(
            DASHBOARD_CHARTS, user.id, (view_mode.value, reference_date.isoformat(), group_by.value),
            lambda: load_charts(store, user, view_mode, reference_date, group_by, tz=tz),
        )
        return {"status": "success", "data": charts.model_dump(mode="json")}
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
