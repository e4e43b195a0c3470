# =============================================================================
# tracker_core/data/supabase_client.py
# Supabase Client Configuration and Remote Store Adapter
# =============================================================================

from __future__ import annotations
import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from tracker_core.config import Settings
from tracker_core.errors import RemoteStoreError
from tracker_core.logging import get_logger

logger = get_logger(__name__)


def get_supabase_client(settings: Settings):
    """
    Create a Supabase client from settings.

    Returns:
        Supabase client instance or None if not configured
    """
    if not settings.supabase_configured:
        return None

    from supabase import create_client

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(f"Failed to initialize Supabase client: {e}")
        return None


def _error_message(error: Exception) -> str:
    # postgrest.APIError carries the backend's message separately
    return getattr(error, "message", None) or str(error)


@dataclass
class RemoteResult:
    """Outcome of a remote call: data on success, a message on failure."""
    data: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RemoteStore(ABC):
    """Authoritative backend table with idempotent upsert keyed on "id"."""

    table_name: str

    @abstractmethod
    async def upsert(self, payload: Dict[str, Any]) -> RemoteResult:
        """Create or update the row with payload["id"]."""

    @abstractmethod
    async def select_all(self) -> RemoteResult:
        """All rows ordered by date ascending."""


class SupabaseRemoteStore(RemoteStore):
    """
    Remote store backed by a Supabase table.

    The Supabase client is synchronous; calls run in a worker thread so the
    event loop is never blocked.
    """

    PAGE_SIZE = 1000    # Supabase returns at most 1000 rows per request

    def __init__(self, client, table_name: str):
        """
        Initialize the store for a specific table.

        Args:
            client: Supabase client from get_supabase_client()
            table_name: Name of the Supabase table
        """
        if client is None:
            raise RemoteStoreError("Supabase client is not configured", table=table_name)
        self.client = client
        self.table_name = table_name

    async def upsert(self, payload: Dict[str, Any]) -> RemoteResult:
        def _upsert():
            return self.client.table(self.table_name).upsert(payload).execute()

        try:
            response = await asyncio.to_thread(_upsert)
        except Exception as e:
            message = _error_message(e)
            logger.warning(f"Upsert into {self.table_name} failed for id={payload.get('id')}: {message}")
            return RemoteResult(error=message)

        return RemoteResult(data=list(getattr(response, "data", None) or []))

    async def select_all(self) -> RemoteResult:
        """
        Fetch ALL rows (handles the Supabase 1000 row limit).

        Uses pagination until a short page comes back.
        """
        def _select_page(offset: int):
            return (
                self.client.table(self.table_name)
                .select("*")
                .order("date", desc=False)
                .range(offset, offset + self.PAGE_SIZE - 1)
                .execute()
            )

        all_rows: List[Dict[str, Any]] = []
        offset = 0

        try:
            while True:
                response = await asyncio.to_thread(_select_page, offset)
                rows = response.data or []
                all_rows.extend(rows)
                if len(rows) < self.PAGE_SIZE:
                    break
                offset += self.PAGE_SIZE
        except Exception as e:
            message = _error_message(e)
            logger.error(f"Error fetching rows from {self.table_name}: {message}")
            return RemoteResult(error=message)

        logger.info(f"Fetched {len(all_rows)} rows from {self.table_name}")
        return RemoteResult(data=all_rows)
