import copy
from typing import Any, Dict, List, Optional, Sequence

import pytest

from tilemaster.config import get_settings
from tilemaster.exceptions import StoreMissingTableError
from tilemaster.services import local_store as local_store_module
from tilemaster.services import remote_store as remote_store_module
from tilemaster.services.local_store import LocalFileBackend
from tilemaster.services.remote_store import RemoteStore
from tilemaster.services.sync_engine import SyncEngine


class InMemoryRemoteStore(RemoteStore):
    """Remote store double: dict-backed tables plus per-operation failure injection"""

    def __init__(self, tables: Sequence[str] = ("tiles", "customers", "employees")):
        self.tables: Dict[str, Dict[str, Any]] = {name: {} for name in tables}
        self.fail_with: Dict[str, Exception] = {}
        self.calls: List[tuple] = []

    def _check(self, op: str, collection: str) -> None:
        self.calls.append((op, collection))
        exc = self.fail_with.get(op)
        if exc is not None:
            raise exc
        if collection not in self.tables:
            raise StoreMissingTableError(
                f'relation "public.{collection}" does not exist', code="42P01", collection=collection
            )

    def seed_rows(self, collection: str, rows: List[Dict[str, Any]]) -> None:
        for row in rows:
            self.tables[collection][row["id"]] = copy.deepcopy(row["json_data"])

    def ids(self, collection: str) -> set:
        return set(self.tables[collection].keys())

    async def select(self, collection: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        self._check("select", collection)
        rows = [{"id": k, "json_data": copy.deepcopy(v)} for k, v in self.tables[collection].items()]
        return rows[:limit] if limit is not None else rows

    async def upsert(self, collection: str, rows: List[Dict[str, Any]]) -> None:
        self._check("upsert", collection)
        for row in rows:
            self.tables[collection][row["id"]] = copy.deepcopy(row["json_data"])

    async def delete_where_id_not_in(self, collection: str, ids: Sequence[str]) -> None:
        self._check("delete", collection)
        keep = set(ids)
        for key in list(self.tables[collection].keys()):
            if key not in keep:
                del self.tables[collection][key]


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Every test starts unconfigured, with fresh singletons and a private data dir"""
    monkeypatch.setenv("SUPABASE_URL", "")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("LOCAL_STORE_DIR", str(tmp_path / "local_data"))
    get_settings.cache_clear()
    monkeypatch.setattr(remote_store_module, "remote_store", None)
    monkeypatch.setattr(local_store_module, "local_store", None)
    yield
    get_settings.cache_clear()


@pytest.fixture
def remote():
    return InMemoryRemoteStore()


@pytest.fixture
def local(tmp_path):
    return LocalFileBackend(str(tmp_path / "fallback"))


@pytest.fixture
def remote_engine(remote, local):
    return SyncEngine(remote=remote, local=local)


@pytest.fixture
def local_engine(local):
    return SyncEngine(remote=None, local=local)
