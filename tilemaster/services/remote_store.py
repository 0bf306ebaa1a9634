"""
Remote store client for the tilemaster collections
Thin wrapper over the Supabase (PostgREST) API: select / batched upsert / prune by id
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient, AsyncClientOptions, acreate_client

from ..config.supabase_config import ID_COLUMN, get_supabase_config, is_supabase_configured
from ..config.settings import get_settings
from ..exceptions import StoreConnectionError, StoreError, StoreMissingTableError

logger = logging.getLogger(__name__)

# Postgres "undefined_table" and PostgREST "table not in schema cache"
MISSING_TABLE_CODES = {"42P01", "PGRST205"}
MISSING_TABLE_MESSAGES = ("does not exist", "could not find the table")


def is_missing_table_error(code: Optional[str], message: Optional[str]) -> bool:
    """Check whether an error means the collection's table is not provisioned"""
    if code and str(code) in MISSING_TABLE_CODES:
        return True
    lowered = (message or "").lower()
    return any(fragment in lowered for fragment in MISSING_TABLE_MESSAGES)


class RemoteStore(ABC):
    """Abstract base class for the remote collection store"""

    @abstractmethod
    async def select(self, collection: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Read rows ({id, json_data}) of a collection"""
        pass

    @abstractmethod
    async def upsert(self, collection: str, rows: List[Dict[str, Any]]) -> None:
        """Insert or replace rows by id in a single batch"""
        pass

    @abstractmethod
    async def delete_where_id_not_in(self, collection: str, ids: Sequence[str]) -> None:
        """Delete every row whose id is not in ids (all rows when ids is empty)"""
        pass


class SupabaseRemoteStore(RemoteStore):
    """Supabase implementation of the remote store"""

    def __init__(self, url: str, key: str, timeout: float = 10.0):
        if not url:
            raise ValueError("SUPABASE_URL is required")
        if not key:
            raise ValueError("SUPABASE_ANON_KEY is required")

        self.supabase_url = url
        self.supabase_key = key
        self.timeout = timeout
        self._client: Optional[AsyncClient] = None

    async def _get_client(self) -> AsyncClient:
        if self._client is None:
            options = AsyncClientOptions(postgrest_client_timeout=self.timeout)
            self._client = await acreate_client(self.supabase_url, self.supabase_key, options=options)
            logger.info(f"✅ Supabase client initialized: {self.supabase_url}")
        return self._client

    def _translate(self, collection: str, exc: Exception) -> StoreError:
        """Map client exceptions onto the store error hierarchy"""
        if isinstance(exc, APIError):
            code = getattr(exc, "code", None)
            message = getattr(exc, "message", None) or str(exc)
            if is_missing_table_error(code, message):
                return StoreMissingTableError(message, code=code, collection=collection)
            return StoreError(message, code=code, collection=collection)
        if isinstance(exc, (httpx.HTTPError, OSError)):
            return StoreConnectionError(str(exc) or exc.__class__.__name__, collection=collection)
        if is_missing_table_error(None, str(exc)):
            return StoreMissingTableError(str(exc), collection=collection)
        return StoreError(str(exc), collection=collection)

    async def select(self, collection: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        try:
            client = await self._get_client()
            query = client.table(collection).select("*")
            if limit is not None:
                query = query.limit(limit)
            result = await query.execute()
            return result.data if result.data else []
        except Exception as e:
            raise self._translate(collection, e) from e

    async def upsert(self, collection: str, rows: List[Dict[str, Any]]) -> None:
        if not rows:
            return
        try:
            client = await self._get_client()
            await client.table(collection).upsert(rows).execute()
            logger.debug(f"Upserted {len(rows)} rows into {collection}")
        except Exception as e:
            raise self._translate(collection, e) from e

    async def delete_where_id_not_in(self, collection: str, ids: Sequence[str]) -> None:
        try:
            client = await self._get_client()
            query = client.table(collection).delete()
            if ids:
                query = query.not_.in_(ID_COLUMN, list(ids))
            else:
                # PostgREST refuses an unfiltered delete; the primary key is never null
                query = query.not_.is_(ID_COLUMN, "null")
            await query.execute()
        except Exception as e:
            raise self._translate(collection, e) from e


# Global instance - lazy initialization
remote_store = None

def get_remote_store() -> Optional[RemoteStore]:
    """Get the global remote store, or None when Supabase is not configured"""
    global remote_store
    if remote_store is None:
        if not is_supabase_configured():
            return None
        config = get_supabase_config()
        remote_store = SupabaseRemoteStore(
            config["url"],
            config["anon_key"],
            timeout=get_settings().SUPABASE_TIMEOUT_SECONDS,
        )
    return remote_store
