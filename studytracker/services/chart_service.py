"""
chart_service.py — Dashboard charts.
Turns a flat list of study sessions into a gap-free timeline of day or month
buckets, a per-category distribution and a capped ranking.

    week  -> calendar week around the reference date, one bucket per day
    month -> calendar month, one bucket per day
    year  -> calendar year, one bucket per month

`aggregate` is pure; `load_charts` is the only piece that touches the store.
"""

import calendar
import logging
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from studytracker.auth import UserIdentity
from studytracker.clock import local_zone
from studytracker.config import WEEK_STARTS_ON, RANKING_LIMIT
from studytracker.models.study_session import StudySession, STUDY_TYPES, UNKNOWN_COURSE, parse_session, parse_sessions
from studytracker.services.color_service import (
    STUDY_TYPE_LABELS, assign_colors, study_type_color, truncate_label,
)
from studytracker.supabase_rest import range_filter

logger = logging.getLogger(__name__)

# Fixed English abbreviations; strftime('%b') would follow the process locale
MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
UNKNOWN_COURSE_LABEL = "Unknown course"


class ViewMode(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class GroupBy(str, Enum):
    STUDY_TYPE = "study_type"
    COURSE = "course"


class ChartBucket(BaseModel):
    bucket_key: str  # yyyy-MM-dd or MMM
    label: str  # dd/MM or MMM
    start: date
    per_category_seconds: dict[str, int]
    per_category_minutes: dict[str, float]
    total_seconds: int
    total: float  # minutes


class CategoryTotal(BaseModel):
    name: str
    value: int  # seconds
    minutes: float


class SeriesInfo(BaseModel):
    key: str
    label: str
    full_label: str
    color: str


class ChartSummary(BaseModel):
    total_seconds: int
    average_seconds: float
    active_buckets: int
    bucket_count: int


class ChartsResult(BaseModel):
    view_mode: ViewMode
    group_by: GroupBy
    window_start: datetime
    window_end: datetime
    timeline: list[ChartBucket]
    distribution: list[CategoryTotal]
    ranking: list[CategoryTotal]
    series: list[SeriesInfo]
    summary: ChartSummary


def to_minutes(seconds: int) -> float:
    return round(seconds / 60, 2)


# ------------------------------------------------------------------
def resolve_window(view_mode: ViewMode, reference_date: date, week_starts_on: int = WEEK_STARTS_ON,
                   tz=None) -> tuple[datetime, datetime]:
    """Inclusive [start, end] of the calendar week/month/year containing reference_date."""
    tz = tz or local_zone()
    view_mode = ViewMode(view_mode)
    if isinstance(reference_date, datetime):
        reference_date = reference_date.astimezone(tz).date() if reference_date.tzinfo else reference_date.date()

    if view_mode == ViewMode.WEEK:
        # isoweekday() % 7 numbers Sunday as 0, matching week_starts_on
        offset = (reference_date.isoweekday() % 7 - week_starts_on) % 7
        first = reference_date - timedelta(days=offset)
        last = first + timedelta(days=6)
    elif view_mode == ViewMode.MONTH:
        first = reference_date.replace(day=1)
        last = reference_date.replace(day=calendar.monthrange(reference_date.year, reference_date.month)[1])
    else:
        first = date(reference_date.year, 1, 1)
        last = date(reference_date.year, 12, 31)

    return datetime.combine(first, time.min, tzinfo=tz), datetime.combine(last, time.max, tzinfo=tz)


def bucket_starts(view_mode: ViewMode, window_start: datetime, window_end: datetime) -> list[date]:
    """Every calendar day (week/month) or month (year) in the window, in order."""
    first, last = window_start.date(), window_end.date()
    starts = []
    if ViewMode(view_mode) == ViewMode.YEAR:
        current = first.replace(day=1)
        while current <= last:
            starts.append(current)
            current = date(current.year + (current.month // 12), current.month % 12 + 1, 1)
    else:
        current = first
        while current <= last:
            starts.append(current)
            current += timedelta(days=1)
    return starts


def _bucket_key(d: date, monthly: bool) -> str:
    return MONTH_ABBR[d.month - 1] if monthly else d.isoformat()


def _bucket_label(d: date, monthly: bool) -> str:
    return MONTH_ABBR[d.month - 1] if monthly else d.strftime("%d/%m")


# ------------------------------------------------------------------
def aggregate(
    sessions: list,
    view_mode: ViewMode,
    reference_date: date,
    group_by: GroupBy = GroupBy.STUDY_TYPE,
    course_titles: Optional[dict[str, str]] = None,
    tz=None,
    week_starts_on: int = WEEK_STARTS_ON,
    ranking_limit: int = RANKING_LIMIT,
) -> ChartsResult:
    """
    Bucket sessions for one window.

    Sessions outside the window are ignored. Unknown study types were already
    folded into 'other' and missing courses into 'unknown' when the records
    were parsed, so no recorded time is lost here.
    """
    tz = tz or local_zone()
    view_mode = ViewMode(view_mode)
    group_by = GroupBy(group_by)
    monthly = view_mode == ViewMode.YEAR
    parsed = [s if isinstance(s, StudySession) else parse_session(s) for s in sessions]

    window_start, window_end = resolve_window(view_mode, reference_date, week_starts_on, tz)
    starts = bucket_starts(view_mode, window_start, window_end)

    # Which bucket each in-window session falls into
    placed: list[tuple[date, StudySession]] = []
    for s in parsed:
        local_day = s.start_time.astimezone(tz).date()
        if not (window_start.date() <= local_day <= window_end.date()):
            continue
        placed.append((local_day.replace(day=1) if monthly else local_day, s))

    if group_by == GroupBy.STUDY_TYPE:
        categories = list(STUDY_TYPES)
    else:
        categories = []
        for _, s in placed:
            if s.course_id not in categories:
                categories.append(s.course_id)

    buckets: dict[date, dict[str, int]] = {d: {c: 0 for c in categories} for d in starts}
    global_totals: dict[str, int] = {c: 0 for c in categories}

    for bucket_day, s in placed:
        key = s.study_type if group_by == GroupBy.STUDY_TYPE else s.course_id
        buckets[bucket_day][key] += s.duration_seconds
        global_totals[key] += s.duration_seconds

    timeline = []
    for d in starts:
        per_cat = buckets[d]
        total_seconds = sum(per_cat.values())
        timeline.append(ChartBucket(
            bucket_key=_bucket_key(d, monthly),
            label=_bucket_label(d, monthly),
            start=d,
            per_category_seconds=dict(per_cat),
            per_category_minutes={c: to_minutes(v) for c, v in per_cat.items()},
            total_seconds=total_seconds,
            total=to_minutes(total_seconds),
        ))

    distribution = [
        CategoryTotal(name=c, value=global_totals[c], minutes=to_minutes(global_totals[c]))
        for c in categories if global_totals[c] > 0
    ]
    if group_by == GroupBy.COURSE:
        # sorted() is stable, so ties keep first-encountered order
        distribution = sorted(distribution, key=lambda e: e.value, reverse=True)

    # Entries past the cap are dropped, not merged, to keep the radar readable
    ranking = sorted(distribution, key=lambda e: e.value, reverse=True)[:max(0, ranking_limit)]

    series = _series(parsed, categories, group_by, course_titles)

    grand_total = sum(global_totals.values())
    bucket_count = len(timeline)
    summary = ChartSummary(
        total_seconds=grand_total,
        average_seconds=round(grand_total / bucket_count, 2) if bucket_count else 0.0,
        active_buckets=sum(1 for b in timeline if b.total_seconds > 0),
        bucket_count=bucket_count,
    )

    return ChartsResult(
        view_mode=view_mode,
        group_by=group_by,
        window_start=window_start,
        window_end=window_end,
        timeline=timeline,
        distribution=distribution,
        ranking=ranking,
        series=series,
        summary=summary,
    )


def _series(sessions: list[StudySession], categories: list[str], group_by: GroupBy,
            course_titles: Optional[dict[str, str]]) -> list[SeriesInfo]:
    if group_by == GroupBy.STUDY_TYPE:
        return [
            SeriesInfo(key=c, label=STUDY_TYPE_LABELS[c], full_label=STUDY_TYPE_LABELS[c], color=study_type_color(c))
            for c in categories
        ]

    titles = dict(course_titles or {})
    for s in sessions:
        if s.course_id not in titles and s.course_title:
            titles[s.course_id] = s.course_title
    colors = assign_colors(categories)
    series = []
    for c in categories:
        full = UNKNOWN_COURSE_LABEL if c == UNKNOWN_COURSE else titles.get(c, c)
        series.append(SeriesInfo(key=c, label=truncate_label(full), full_label=full, color=colors[c]))
    return series


# ------------------------------------------------------------------
def load_charts(store, user: UserIdentity | None, view_mode: ViewMode, reference_date: date,
                group_by: GroupBy = GroupBy.STUDY_TYPE, tz=None) -> ChartsResult:
    """Fetch the user's sessions for the window and aggregate them."""
    tz = tz or local_zone()
    if user is None:
        logger.info("Charts requested without an authenticated user; returning empty timeline")
        return aggregate([], view_mode, reference_date, group_by, tz=tz)

    window_start, window_end = resolve_window(view_mode, reference_date, tz=tz)
    rows = store.select(
        "study_sessions",
        filters={"user_id": user.id},
        columns="id,start_time,duration_seconds,study_type,course_id,courses(title)",
        query_string=range_filter("start_time", gte=window_start.isoformat(), lte=window_end.isoformat()),
    )
    sessions = parse_sessions(rows)
    logger.debug(f"Aggregating {len(sessions)} sessions for user {user.id} ({view_mode}, {group_by})")
    return aggregate(sessions, view_mode, reference_date, group_by, tz=tz)
