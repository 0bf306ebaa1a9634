import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, Mock
from postgrest.exceptions import APIError

from tilemaster.exceptions import StoreConnectionError, StoreError, StoreMissingTableError
from tilemaster.services.remote_store import (
    SupabaseRemoteStore,
    get_remote_store,
    is_missing_table_error,
)


class TestSupabaseRemoteStore:
    """Unit tests for the Supabase remote store wrapper"""

    @pytest.fixture
    def client(self):
        """Mock Supabase async client with chainable query builders"""
        return MagicMock()

    @pytest.fixture
    def store(self, client):
        store = SupabaseRemoteStore("https://example.supabase.co", "anon-key", timeout=2.0)
        store._client = client
        return store

    def test_requires_url_and_key(self):
        with pytest.raises(ValueError):
            SupabaseRemoteStore("", "anon-key")
        with pytest.raises(ValueError):
            SupabaseRemoteStore("https://example.supabase.co", "")

    def test_missing_table_detection(self):
        assert is_missing_table_error("42P01", "")
        assert is_missing_table_error("PGRST205", None)
        assert is_missing_table_error(None, 'relation "public.tiles" does not exist')
        assert is_missing_table_error(None, "Could not find the table 'public.tiles' in the schema cache")
        assert not is_missing_table_error("PGRST301", "JWT expired")
        assert not is_missing_table_error(None, None)

    @pytest.mark.asyncio
    async def test_select_with_limit(self, store, client):
        rows = [{"id": "1", "json_data": {"name": "Carrara White"}}]
        query = client.table.return_value.select.return_value.limit.return_value
        query.execute = AsyncMock(return_value=Mock(data=rows))

        result = await store.select("tiles", limit=1)

        assert result == rows
        client.table.assert_called_with("tiles")
        client.table.return_value.select.assert_called_with("*")
        client.table.return_value.select.return_value.limit.assert_called_with(1)

    @pytest.mark.asyncio
    async def test_select_without_rows_returns_empty_list(self, store, client):
        client.table.return_value.select.return_value.execute = AsyncMock(return_value=Mock(data=None))
        assert await store.select("customers") == []

    @pytest.mark.asyncio
    async def test_upsert_sends_one_batch(self, store, client):
        builder = client.table.return_value.upsert.return_value
        builder.execute = AsyncMock(return_value=Mock(data=[]))
        rows = [{"id": "a", "json_data": {}}, {"id": "b", "json_data": {}}]

        await store.upsert("tiles", rows)

        client.table.return_value.upsert.assert_called_once_with(rows)
        builder.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_upsert_of_nothing_skips_the_request(self, store, client):
        await store.upsert("tiles", [])
        client.table.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_prunes_ids_outside_the_set(self, store, client):
        not_builder = client.table.return_value.delete.return_value.not_
        not_builder.in_.return_value.execute = AsyncMock(return_value=Mock(data=[]))

        await store.delete_where_id_not_in("tiles", ["a", "b"])

        not_builder.in_.assert_called_once_with("id", ["a", "b"])

    @pytest.mark.asyncio
    async def test_delete_with_empty_set_removes_all_rows(self, store, client):
        not_builder = client.table.return_value.delete.return_value.not_
        not_builder.is_.return_value.execute = AsyncMock(return_value=Mock(data=[]))

        await store.delete_where_id_not_in("employees", [])

        not_builder.is_.assert_called_once_with("id", "null")
        not_builder.in_.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_table_api_error(self, store, client):
        error = APIError({"code": "42P01", "message": 'relation "public.tiles" does not exist'})
        client.table.return_value.select.return_value.execute = AsyncMock(side_effect=error)

        with pytest.raises(StoreMissingTableError) as exc_info:
            await store.select("tiles")

        assert exc_info.value.code == "42P01"
        assert exc_info.value.collection == "tiles"

    @pytest.mark.asyncio
    async def test_other_api_error(self, store, client):
        error = APIError({"code": "PGRST301", "message": "JWT expired"})
        client.table.return_value.upsert.return_value.execute = AsyncMock(side_effect=error)

        with pytest.raises(StoreError) as exc_info:
            await store.upsert("customers", [{"id": "c1", "json_data": {}}])

        assert not isinstance(exc_info.value, StoreMissingTableError)
        assert exc_info.value.message == "JWT expired"

    @pytest.mark.asyncio
    async def test_network_error_is_connection_error(self, store, client):
        client.table.return_value.select.return_value.limit.return_value.execute = AsyncMock(
            side_effect=httpx.ConnectError("Name or service not known")
        )

        with pytest.raises(StoreConnectionError):
            await store.select("tiles", limit=1)


def test_get_remote_store_unconfigured():
    assert get_remote_store() is None


def test_get_remote_store_configured(monkeypatch):
    from tilemaster.config import get_settings

    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
    monkeypatch.setenv("SUPABASE_TIMEOUT_SECONDS", "3.5")
    get_settings.cache_clear()

    store = get_remote_store()

    assert isinstance(store, SupabaseRemoteStore)
    assert store.timeout == 3.5
    assert get_remote_store() is store
