"""
supabase_rest.py — HTTP-based database client using Supabase's PostgREST API.
All study data (sessions, courses, notes, profiles) lives in the hosted
Supabase project; this module is the only place that talks to it.
"""
import logging
from urllib.parse import quote

import httpx

from studytracker.config import SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY
from studytracker.errors import PersistenceFailure

logger = logging.getLogger(__name__)


def _headers():
    return {
        "apikey": SUPABASE_SERVICE_ROLE_KEY,
        "Authorization": f"Bearer {SUPABASE_SERVICE_ROLE_KEY}",
        "Content-Type": "application/json",
        "Prefer": "return=representation",
    }


def _eq_filters(filters: dict | None) -> str:
    parts = ""
    if filters:
        for key, value in filters.items():
            parts += f"&{key}=eq.{quote(str(value))}"
    return parts


def range_filter(column: str, gte: str | None = None, lte: str | None = None) -> str:
    """Build an inclusive range fragment, e.g. ``start_time=gte.X&start_time=lte.Y``."""
    parts = []
    if gte is not None:
        parts.append(f"{column}=gte.{quote(gte)}")
    if lte is not None:
        parts.append(f"{column}=lte.{quote(lte)}")
    return "&".join(parts)


def sb_select(table: str, filters: dict = None, columns: str = "*", query_string: str = None,
              order: str = None, limit: int = None) -> list:
    """Select rows from a table with optional equality filters, raw query, ordering and limit."""
    url = f"{SUPABASE_URL}/rest/v1/{table}?select={columns}"
    url += _eq_filters(filters)
    if query_string:
        url += f"&{query_string}"
    if order:
        url += f"&order={order}"
    if limit is not None:
        url += f"&limit={int(limit)}"

    with httpx.Client(timeout=10) as client:
        resp = client.get(url, headers=_headers())
        resp.raise_for_status()
        return resp.json()


def sb_insert(table: str, data: dict) -> dict:
    """Insert a row and return the created record."""
    url = f"{SUPABASE_URL}/rest/v1/{table}"
    with httpx.Client(timeout=10) as client:
        resp = client.post(url, json=data, headers=_headers())
        resp.raise_for_status()
        result = resp.json()
        return result[0] if isinstance(result, list) and result else {}


def sb_update(table: str, filter_col: str, filter_val, data: dict, filters: dict = None) -> dict:
    """Update rows where filter_col = filter_val (and every extra equality filter)."""
    url = f"{SUPABASE_URL}/rest/v1/{table}?{filter_col}=eq.{quote(str(filter_val))}"
    url += _eq_filters(filters)
    with httpx.Client(timeout=10) as client:
        resp = client.patch(url, json=data, headers=_headers())
        resp.raise_for_status()
        result = resp.json()
        return result[0] if isinstance(result, list) and result else {}


def sb_delete(table: str, filter_col: str, filter_val, filters: dict = None) -> None:
    """Delete rows where filter_col = filter_val (and every extra equality filter)."""
    url = f"{SUPABASE_URL}/rest/v1/{table}?{filter_col}=eq.{quote(str(filter_val))}"
    url += _eq_filters(filters)
    with httpx.Client(timeout=10) as client:
        resp = client.delete(url, headers=_headers())
        resp.raise_for_status()


def sb_count(table: str, filters: dict = None, query_string: str = None) -> int:
    """Count rows in a table with optional filters."""
    url = f"{SUPABASE_URL}/rest/v1/{table}?select=id"
    url += _eq_filters(filters)
    if query_string:
        url += f"&{query_string.replace('+', '%2B')}"

    headers = {**_headers(), "Prefer": "count=exact"}
    with httpx.Client(timeout=10) as client:
        # HEAD returns only the Content-Range header carrying the total
        resp = client.head(url, headers=headers)
        resp.raise_for_status()
        content_range = resp.headers.get("content-range", "0-0/0")
        try:
            return int(content_range.split("/")[-1])
        except ValueError:
            return 0


class RestStore:
    """
    The remote data store as the services see it: query / insert / update /
    delete / count over named collections. Each call is an individual network
    request; any failure surfaces as PersistenceFailure.
    """

    def _call(self, op: str, table: str, fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except httpx.HTTPStatusError as e:
            logger.error(f"Store {op} on '{table}' failed with HTTP {e.response.status_code}: {e.response.text}")
            raise PersistenceFailure(f"{op} on {table} failed: HTTP {e.response.status_code}",
                                     status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.error(f"Store {op} on '{table}' failed: {e}")
            raise PersistenceFailure(f"{op} on {table} failed: {e}") from e

    def select(self, table: str, filters: dict = None, columns: str = "*", query_string: str = None,
               order: str = None, limit: int = None) -> list:
        return self._call("select", table, sb_select, table, filters=filters, columns=columns,
                          query_string=query_string, order=order, limit=limit)

    def insert(self, table: str, data: dict) -> dict:
        return self._call("insert", table, sb_insert, table, data)

    def update(self, table: str, record_id, data: dict, filters: dict = None) -> dict:
        return self._call("update", table, sb_update, table, "id", record_id, data, filters=filters)

    def delete(self, table: str, record_id, filters: dict = None) -> None:
        return self._call("delete", table, sb_delete, table, "id", record_id, filters=filters)

    def count(self, table: str, filters: dict = None, query_string: str = None) -> int:
        return self._call("count", table, sb_count, table, filters=filters, query_string=query_string)


_store: RestStore = None


def get_store() -> RestStore:
    """FastAPI dependency — the shared RestStore instance."""
    global _store
    if _store is None:
        _store = RestStore()
    return _store
