from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from studytracker.config import TIMEZONE


def now_ms() -> int:
    """Current wall-clock time as integer epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def ms_to_datetime(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def ms_to_iso(ms: int) -> str:
    """Epoch milliseconds as an ISO8601 UTC string (millisecond precision)."""
    return ms_to_datetime(ms).isoformat(timespec="milliseconds")


def parse_iso(value: str) -> datetime:
    """Parse an ISO8601 timestamp from the store; naive values are taken as UTC."""
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def local_zone(name: str = TIMEZONE):
    """Return the tzinfo used for calendar bucketing."""
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def fmt_hms(seconds: int) -> str:
    """Format seconds as HH:MM:SS."""
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    return f"{h:02}:{m:02}:{s:02}"


def format_duration(seconds: int) -> str:
    """Human readable duration, e.g. '1h 5m 3s' or '12m 0s'."""
    hours = seconds // 3600
    mins = (seconds % 3600) // 60
    secs = seconds % 60
    if hours > 0:
        return f"{hours}h {mins}m {secs}s"
    return f"{mins}m {secs}s"
