"""
Collection sync engine
Health check, load-with-default and save/reconcile for the tiles, customers
and employees collections. Supabase when configured, local files otherwise;
the two are never mixed within one run.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, List, Optional, Sequence, Type, TypeVar

from ..config.supabase_config import CUSTOMERS, EMPLOYEES, LOCAL_STORAGE_KEYS, TILES
from ..exceptions import StoreMissingTableError
from ..models import CustomerRecord, Record, StaffRecord, StockItem
from .local_store import LocalStore, get_local_store
from .remote_store import RemoteStore, get_remote_store

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


class HealthStatus(str, Enum):
    OK = "OK"
    MISSING_TABLES = "MISSING_TABLES"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    UNAVAILABLE = "UNAVAILABLE"


class SaveMode(str, Enum):
    REMOTE = "remote"
    LOCAL = "local"


@dataclass
class SaveOutcome:
    """Result of one save; callers on the UI path are free to ignore it"""
    ok: bool
    mode: SaveMode
    error: Optional[str] = None


@dataclass
class LoadedCollections:
    tiles: List[StockItem] = field(default_factory=list)
    customers: List[CustomerRecord] = field(default_factory=list)
    employees: List[StaffRecord] = field(default_factory=list)


class CollectionSync(Generic[R]):
    """Loads and reconciles one collection against the backing store"""

    def __init__(self, name: str, record_type: Type[R], remote: Optional[RemoteStore],
                 local: LocalStore, local_key: Optional[str] = None):
        self.name = name
        self.record_type = record_type
        self.remote = remote
        self.local = local
        self.local_key = local_key or LOCAL_STORAGE_KEYS[name]

        # Single-flight save state
        self._pending: Optional[List[R]] = None
        self._inflight: Optional[asyncio.Task] = None

    @property
    def remote_enabled(self) -> bool:
        return self.remote is not None

    # ===== LOAD =====

    async def load(self, default_seed: Sequence[R]) -> List[R]:
        """Load the collection; default_seed is returned when there is nothing usable"""
        if self.remote is not None:
            return await self._load_remote(default_seed)
        return await self._load_local(default_seed)

    async def _load_remote(self, default_seed: Sequence[R]) -> List[R]:
        try:
            rows = await self.remote.select(self.name)
        except Exception as e:
            if not isinstance(e, StoreMissingTableError):
                logger.error(f"❌ Supabase load error ({self.name}): {e}")
            # Fail open to the caller's data; never fall back to local files here
            return list(default_seed)

        if not rows:
            return list(default_seed)

        records = [self.record_type.from_row(row) for row in rows]
        self._warn_raw(records)
        return records

    async def _load_local(self, default_seed: Sequence[R]) -> List[R]:
        try:
            blob = await self.local.get(self.local_key)
            if blob is None:
                return list(default_seed)
            payloads = json.loads(blob)
            if not isinstance(payloads, list):
                raise ValueError(f"expected a list, got {type(payloads).__name__}")
            records = [self.record_type.decode(p) for p in payloads]
        except Exception as e:
            logger.warning(f"⚠️ Local data for {self.name} unreadable, using defaults: {e}")
            return list(default_seed)
        self._warn_raw(records)
        return records

    def _warn_raw(self, records: Sequence[R]) -> None:
        for record in records:
            if record.is_raw:
                logger.warning(f"⚠️ Keeping undecodable {self.name} record {record.id!r} as stored")

    # ===== SAVE =====

    async def save(self, current: Sequence[R]) -> SaveOutcome:
        """Make the store hold exactly `current`; errors are logged, never raised"""
        if self.remote is not None:
            return await self._save_remote(current)
        return await self._save_local(current)

    async def _save_remote(self, current: Sequence[R]) -> SaveOutcome:
        # Last occurrence wins if an id is repeated; a batch may not touch a row twice
        rows_by_id = {record.id: record.to_row() for record in current}
        try:
            # 1. Upsert modified/new records
            if rows_by_id:
                await self.remote.upsert(self.name, list(rows_by_id.values()))

            # 2. Prune records no longer held in memory (all of them when empty)
            await self.remote.delete_where_id_not_in(self.name, list(rows_by_id.keys()))
            return SaveOutcome(ok=True, mode=SaveMode.REMOTE)
        except Exception as e:
            # Missing tables were already reported by the health check
            if not isinstance(e, StoreMissingTableError):
                logger.error(f"❌ Supabase save error ({self.name}): {e}")
            return SaveOutcome(ok=False, mode=SaveMode.REMOTE, error=str(e))

    async def _save_local(self, current: Sequence[R]) -> SaveOutcome:
        try:
            blob = json.dumps([record.to_payload() for record in current])
            await self.local.set(self.local_key, blob)
            return SaveOutcome(ok=True, mode=SaveMode.LOCAL)
        except Exception as e:
            logger.error(f"❌ Local save error ({self.name}): {e}")
            return SaveOutcome(ok=False, mode=SaveMode.LOCAL, error=str(e))

    def schedule_save(self, snapshot: Sequence[R]) -> asyncio.Task:
        """
        Queue a save without blocking the caller.

        At most one save runs per collection. Snapshots arriving while it runs
        are coalesced: only the newest one is saved once the current save ends.

        Returns:
            The task that will persist this snapshot (shared with coalesced calls)
        """
        self._pending = list(snapshot)
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._drain())
        return self._inflight

    async def _drain(self) -> None:
        while self._pending is not None:
            snapshot, self._pending = self._pending, None
            await self.save(snapshot)

    async def flush(self) -> None:
        """Wait until no save is queued or running"""
        while self._inflight is not None and not self._inflight.done():
            await self._inflight

    # ===== RESET =====

    async def clear(self) -> bool:
        """Delete every stored record of this collection (remote rows and local key)"""
        ok = True
        if self.remote is not None:
            try:
                await self.remote.delete_where_id_not_in(self.name, [])
            except Exception as e:
                logger.error(f"❌ Clear error ({self.name}): {e}")
                ok = False
        try:
            await self.local.remove(self.local_key)
        except Exception as e:
            logger.error(f"❌ Local clear error ({self.name}): {e}")
            ok = False
        return ok


class SyncEngine:
    """Health check plus one CollectionSync per collection"""

    def __init__(self, remote: Optional[RemoteStore] = None, local: Optional[LocalStore] = None):
        self.remote = remote
        self.local = local if local is not None else get_local_store()

        self.tiles: CollectionSync[StockItem] = CollectionSync(TILES, StockItem, remote, self.local)
        self.customers: CollectionSync[CustomerRecord] = CollectionSync(CUSTOMERS, CustomerRecord, remote, self.local)
        self.employees: CollectionSync[StaffRecord] = CollectionSync(EMPLOYEES, StaffRecord, remote, self.local)

    @classmethod
    def from_settings(cls) -> "SyncEngine":
        """Build an engine from the environment (Supabase if configured)"""
        remote = get_remote_store()
        if remote is None:
            logger.warning("⚠️ No Supabase configuration found, using local file storage")
        return cls(remote=remote, local=get_local_store())

    @property
    def remote_enabled(self) -> bool:
        return self.remote is not None

    @property
    def collections(self) -> List[CollectionSync]:
        return [self.tiles, self.customers, self.employees]

    async def check_health(self) -> HealthStatus:
        """Probe the tiles table once; no retries, no writes"""
        if self.remote is None:
            return HealthStatus.UNAVAILABLE

        try:
            await self.remote.select(TILES, limit=1)
        except StoreMissingTableError:
            return HealthStatus.MISSING_TABLES
        except Exception as e:
            logger.error(f"❌ DB health check error: {e}")
            return HealthStatus.CONNECTION_ERROR

        return HealthStatus.OK

    async def load_all(self, tiles_seed: Sequence[StockItem] = (),
                       customers_seed: Sequence[CustomerRecord] = (),
                       employees_seed: Sequence[StaffRecord] = ()) -> LoadedCollections:
        """Load the three collections concurrently"""
        tiles, customers, employees = await asyncio.gather(
            self.tiles.load(tiles_seed),
            self.customers.load(customers_seed),
            self.employees.load(employees_seed),
        )
        return LoadedCollections(tiles=tiles, customers=customers, employees=employees)

    async def flush(self) -> None:
        await asyncio.gather(*(c.flush() for c in self.collections))

    async def clear_all(self) -> bool:
        """Factory reset: wipe every collection, continuing past failures"""
        results = await asyncio.gather(*(c.clear() for c in self.collections))
        logger.info(f"🧹 Cleared collections: {dict(zip([c.name for c in self.collections], results))}")
        return all(results)
