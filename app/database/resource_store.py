"""
Thin data-access layer over the Supabase (PostgREST) client.

Handlers and services talk to ResourceStore instead of building PostgREST
queries inline. Every call is a single statement; there is no multi-statement
transaction primitive, so composite invariants (vote counters, item
positions) are pushed into single store-side operations where needed.
"""

import logging
import time
from typing import Any, Dict, Iterable, List, Optional, Tuple

import httpx
from fastapi import Depends, HTTPException
from postgrest.exceptions import APIError
from supabase import Client

from app.config.settings import settings
from app.core.errors import ConflictError, NotFoundError, UpstreamError
from app.database.supabase_client import get_service_supabase

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

# Characters with meaning inside a PostgREST or=() filter
_SEARCH_RESERVED = str.maketrans({",": " ", "(": " ", ")": " ", "*": " ", "%": " "})


class ResourceStore:
    def __init__(
        self,
        supabase: Client,
        read_retries: Optional[int] = None,
        retry_backoff: Optional[float] = None,
    ):
        self.supabase = supabase
        self.read_retries = settings.store_read_retries if read_retries is None else read_retries
        self.retry_backoff = settings.store_retry_backoff_seconds if retry_backoff is None else retry_backoff

    def _read(self, description: str, fn):
        """Run an idempotent read with bounded exponential backoff on transport failures."""
        attempts = max(1, self.read_retries)
        delay = self.retry_backoff
        for attempt in range(1, attempts + 1):
            try:
                return fn()
            except HTTPException:
                raise
            except httpx.TransportError as e:
                if attempt == attempts:
                    logger.error(f"Store read failed after {attempts} attempts ({description}): {e}")
                    raise UpstreamError()
                logger.warning(f"Store read failed ({description}), retrying in {delay:.2f}s: {e}")
                time.sleep(delay)
                delay *= 2
            except APIError as e:
                logger.error(f"Store read error ({description}): {e}")
                raise UpstreamError()

    def _write(self, description: str, fn):
        try:
            return fn()
        except HTTPException:
            raise
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.info(f"Unique constraint hit ({description}): {e}")
                raise ConflictError("Resource already exists")
            logger.error(f"Store write error ({description}): {e}")
            raise UpstreamError()
        except httpx.HTTPError as e:
            logger.error(f"Store write error ({description}): {e}")
            raise UpstreamError()

    @staticmethod
    def _apply_filters(query, filters: Optional[Dict[str, Any]]):
        for column, value in (filters or {}).items():
            if value is None:
                query = query.is_(column, "null")
            else:
                query = query.eq(column, value)
        return query

    def get(self, table: str, id: str, not_found: str = "Not found") -> Dict[str, Any]:
        """Fetch one row by primary key or raise NotFoundError."""
        row = self.find_one(table, {"id": id})
        if row is None:
            raise NotFoundError(not_found)
        return row

    def find_one(self, table: str, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        def run():
            query = self._apply_filters(self.supabase.table(table).select("*"), filters)
            return query.limit(1).execute()

        result = self._read(f"find_one {table}", run)
        if result is None or not result.data:
            return None
        return result.data[0]

    def query(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
        in_: Optional[Dict[str, Iterable[Any]]] = None,
        search: Optional[Tuple[List[str], str]] = None,
    ) -> List[Dict[str, Any]]:
        """Filtered select. `search` is (columns, term) matched case-insensitively against any column."""
        in_lists = {column: list(values) for column, values in (in_ or {}).items()}
        if any(not values for values in in_lists.values()):
            return []

        def run():
            query = self._apply_filters(self.supabase.table(table).select("*"), filters)
            for column, values in in_lists.items():
                query = query.in_(column, values)
            if search:
                columns, term = search
                term = term.translate(_SEARCH_RESERVED).strip()
                if term:
                    query = query.or_(",".join(f"{c}.ilike.*{term}*" for c in columns))
            if order:
                query = query.order(order, desc=desc)
            if limit is not None:
                query = query.limit(limit).offset(offset)
            return query.execute()

        result = self._read(f"query {table}", run)
        return list(result.data or []) if result is not None else []

    def count(self, table: str, filters: Optional[Dict[str, Any]] = None) -> int:
        def run():
            query = self.supabase.table(table).select("id", count="exact")
            return self._apply_filters(query, filters).execute()

        result = self._read(f"count {table}", run)
        return (result.count or 0) if result is not None else 0

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        result = self._write(f"insert {table}", lambda: self.supabase.table(table).insert(row).execute())
        if not result.data:
            logger.error(f"Insert into {table} returned no row")
            raise UpstreamError()
        return result.data[0]

    def insert_many(self, table: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if not rows:
            return []
        result = self._write(f"insert_many {table}", lambda: self.supabase.table(table).insert(rows).execute())
        return list(result.data or [])

    def upsert(self, table: str, row: Dict[str, Any], on_conflict: str = "id") -> None:
        """Insert unless a row with the same conflict key exists; existing rows are left untouched."""
        self._write(
            f"upsert {table}",
            lambda: self.supabase.table(table)
            .upsert(row, on_conflict=on_conflict, ignore_duplicates=True)
            .execute(),
        )

    def update(self, table: str, id: str, patch: Dict[str, Any], not_found: str = "Not found") -> Dict[str, Any]:
        result = self._write(
            f"update {table}",
            lambda: self.supabase.table(table).update(patch).eq("id", id).execute(),
        )
        if not result.data:
            raise NotFoundError(not_found)
        return result.data[0]

    def update_where(self, table: str, filters: Dict[str, Any], patch: Dict[str, Any]) -> List[Dict[str, Any]]:
        def run():
            return self._apply_filters(self.supabase.table(table).update(patch), filters).execute()

        result = self._write(f"update_where {table}", run)
        return list(result.data or [])

    def delete(self, table: str, id: str) -> None:
        self._write(f"delete {table}", lambda: self.supabase.table(table).delete().eq("id", id).execute())

    def delete_where(self, table: str, filters: Dict[str, Any]) -> int:
        def run():
            return self._apply_filters(self.supabase.table(table).delete(), filters).execute()

        result = self._write(f"delete_where {table}", run)
        return len(result.data or [])

    def increment(self, table: str, id: str, column: str, delta: int) -> int:
        """
        Atomically add `delta` to an integer column and return the new value.

        Backed by the increment_counter Postgres function:

            create or replace function increment_counter(
                table_name text, row_id uuid, column_name text, delta integer
            ) returns integer language plpgsql as $$
            declare new_value integer;
            begin
                execute format(
                    'update %I set %I = coalesce(%I, 0) + $1 where id = $2 returning %I',
                    table_name, column_name, column_name, column_name
                ) into new_value using delta, row_id;
                return new_value;
            end $$;
        """
        result = self._write(
            f"increment {table}.{column}",
            lambda: self.supabase.rpc(
                "increment_counter",
                {"table_name": table, "row_id": id, "column_name": column, "delta": delta},
            ).execute(),
        )
        if result.data is None:
            raise NotFoundError()
        return int(result.data)


def get_resource_store(supabase: Client = Depends(get_service_supabase)) -> ResourceStore:
    return ResourceStore(supabase)
