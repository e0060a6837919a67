import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from studytracker import __version__
from studytracker.auth import UserIdentity, get_optional_user
from studytracker.config import LOG_LEVEL
from studytracker.database import init_db
from studytracker.routes.auth_routes import router as auth_router
from studytracker.routes.course_routes import router as course_router
from studytracker.routes.dashboard_routes import router as dashboard_router
from studytracker.routes.profile_routes import router as profile_router
from studytracker.routes.session_routes import router as session_router
from studytracker.routes.timer_routes import router as timer_router
from studytracker.supabase_client import is_supabase_configured

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Local state database holds running timers across restarts
    try:
        init_db()
    except Exception as e:
        logger.error(f"Local state database init failed: {e}")
    if not is_supabase_configured():
        logger.warning("Supabase is not fully configured; store calls will fail")
    yield


app = FastAPI(title="Study Tracker API", version=__version__, lifespan=lifespan)

@app.get("/api/v1/health-check")
async def health(user: UserIdentity | None = Depends(get_optional_user)):
    return {
        "status": "ok",
        "message": "Backend is alive!",
        "supabase_configured": is_supabase_configured(),
        "authenticated": user is not None,
    }

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(timer_router)
app.include_router(session_router)
app.include_router(dashboard_router)
app.include_router(course_router)
app.include_router(profile_router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("studytracker.main:app", host="0.0.0.0", port=8000, reload=True)
