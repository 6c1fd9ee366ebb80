"""Supabase client wrapper with async context manager support."""

import os
from typing import Any, Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from field_catalog.utils.errors import ConfigurationError, FetchFailed, NotFound, WriteFailed
from field_catalog.utils.logging import get_structured_logger, log_timing

logger = get_structured_logger(__name__)

# Global client instance (singleton pattern)
_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton."""
    global _client

    if _client is None:
        url = os.environ.get("SUPABASE_URL")
        key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY") or os.environ.get("SUPABASE_ANON_KEY")

        if not url or not key:
            raise ConfigurationError(
                "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY (or SUPABASE_ANON_KEY) must be set"
            )

        options = ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )

        _client = create_client(url, key, options)
        logger.info("Supabase client initialized", url=url)

    return _client


class SupabaseClient:
    """Async context manager for Supabase client."""

    def __init__(self):
        self.client: Optional[Client] = None

    async def __aenter__(self) -> Client:
        self.client = get_supabase_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Supabase operation error",
                error=str(exc_val),
                error_type=exc_type.__name__,
            )
        return False


# Generic row operations. Each is a single round-trip; nothing here retries.
async def insert_row(table: str, fields: dict) -> dict:
    """Insert one row and return it as stored."""
    async with SupabaseClient() as client:
        try:
            with log_timing("supabase.insert", logger=logger, table=table):
                result = client.table(table).insert(fields).execute()
        except Exception as e:
            raise WriteFailed(f"Failed to insert into {table}: {e}") from e

        if result.data and len(result.data) > 0:
            return result.data[0]
        raise WriteFailed(f"Failed to insert into {table}: no data returned")


async def update_row(
    table: str,
    record_id: str,
    fields: dict,
    expected: Optional[dict] = None,
) -> Optional[dict]:
    """
    Update a single row keyed by id.

    ``expected`` adds equality guards (e.g. the current status) so the write
    only lands if the row still matches. Returns the updated row, or None
    when no row matched the id and guards.
    """
    async with SupabaseClient() as client:
        try:
            with log_timing("supabase.update", logger=logger, table=table, record_id=record_id):
                query = client.table(table).update(fields).eq("id", record_id)
                for column, value in (expected or {}).items():
                    query = query.eq(column, value)
                result = query.execute()
        except Exception as e:
            raise WriteFailed(f"Failed to update {table} {record_id}: {e}") from e

        if result.data and len(result.data) > 0:
            return result.data[0]
        return None


async def select_rows(
    table: str,
    columns: str = "*",
    filters: Optional[dict[str, Any]] = None,
    order_by: Optional[str] = None,
    descending: bool = False,
) -> list[dict]:
    """Select rows matching all equality filters."""
    async with SupabaseClient() as client:
        try:
            with log_timing("supabase.select", logger=logger, table=table):
                query = client.table(table).select(columns)
                for column, value in (filters or {}).items():
                    query = query.eq(column, value)
                if order_by:
                    query = query.order(order_by, desc=descending)
                result = query.execute()
        except Exception as e:
            raise FetchFailed(f"Failed to fetch from {table}: {e}") from e

        return result.data if result.data else []


async def select_one(table: str, value: str, columns: str = "*", key: str = "id") -> dict:
    """Select the single row whose ``key`` equals ``value``; NotFound on zero rows."""
    rows = await select_rows(table, columns=columns, filters={key: value})
    if not rows:
        raise NotFound(f"No row in {table} with {key}={value}")
    return rows[0]


async def count_rows(table: str, filters: Optional[dict[str, Any]] = None) -> int:
    """Exact row count for the equality filters, without fetching the rows."""
    async with SupabaseClient() as client:
        try:
            with log_timing("supabase.count", logger=logger, table=table):
                query = client.table(table).select("id", count="exact")
                for column, value in (filters or {}).items():
                    query = query.eq(column, value)
                result = query.execute()
        except Exception as e:
            raise FetchFailed(f"Failed to count {table}: {e}") from e

        if result.count is not None:
            return result.count
        return len(result.data or [])
