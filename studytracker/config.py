import os
from dotenv import load_dotenv

load_dotenv()

# --- Supabase Configuration ---
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
# Used to verify the access tokens issued by Supabase Auth
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET", "")
SUPABASE_JWT_AUDIENCE = os.getenv("SUPABASE_JWT_AUDIENCE", "authenticated")
JWT_ALGORITHM = "HS256"

# --- Local state (timer survival across restarts) ---
LOCAL_STATE_URL = os.getenv("LOCAL_STATE_URL", "sqlite:///./data/studytracker.db")

# --- Calendar ---
TIMEZONE = os.getenv("TIMEZONE", "UTC")
WEEK_STARTS_ON = int(os.getenv("WEEK_STARTS_ON", "0"))  # 0 = Sunday ... 6 = Saturday

# --- Dashboard ---
DEFAULT_DAILY_GOAL_MINUTES = int(os.getenv("DEFAULT_DAILY_GOAL_MINUTES", "120"))
RANKING_LIMIT = int(os.getenv("RANKING_LIMIT", "5"))
LABEL_MAX_LENGTH = int(os.getenv("LABEL_MAX_LENGTH", "18"))
CHART_CACHE_TTL = int(os.getenv("CHART_CACHE_TTL", "300"))
STREAK_LOOKBACK_DAYS = 30

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
