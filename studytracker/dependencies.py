# dependencies.py — Process-wide singletons handed to routes via FastAPI Depends

from studytracker.config import CHART_CACHE_TTL
from studytracker.services.cache_service import QueryCache
from studytracker.services.event_bus import SessionEvents
from studytracker.services.local_storage import LocalStorage
from studytracker.services.session_writer import SessionWriter
from studytracker.services.timer_engine import TimerRegistry
from studytracker.supabase_rest import get_store

_events: SessionEvents = None
_cache: QueryCache = None
_storage: LocalStorage = None
_registry: TimerRegistry = None

def get_events() -> SessionEvents:
    global _events
    if _events is None:
        _events = SessionEvents()
    return _events

def get_cache() -> QueryCache:
    """Dashboard cache, subscribed to session-finished events on first use."""
    global _cache
    if _cache is None:
        _cache = QueryCache(ttl_seconds=CHART_CACHE_TTL)
        _cache.attach(get_events())
    return _cache

def get_local_storage() -> LocalStorage:
    global _storage
    if _storage is None:
        _storage = LocalStorage()
    return _storage

def get_timer_registry() -> TimerRegistry:
    global _registry
    if _registry is None:
        # Make sure the cache is listening before the first session can finish
        get_cache()
        _registry = TimerRegistry(
            storage=get_local_storage(),
            writer=SessionWriter(get_store()),
            events=get_events(),
        )
    return _registry
