"""Tests for record loading and the lazily populated store."""

import asyncio
import json

import httpx
import pytest

from listing.core.config import settings
from listing.core.source import (
    RecordSourceError,
    fetch_remote_records,
    load_records,
    read_local_records,
)
from listing.core.store import RecordStore, to_records
from listing.schemas.products import QueryRequest


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestReadLocalRecords:
    def test_reads_array(self, tmp_path, raw_catalog):
        path = tmp_path / "db.json"
        path.write_text(json.dumps(raw_catalog), encoding="utf-8")
        assert read_local_records(str(path)) == raw_catalog

    def test_missing_file(self, tmp_path):
        with pytest.raises(RecordSourceError):
            read_local_records(str(tmp_path / "nope.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "db.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(RecordSourceError):
            read_local_records(str(path))

    def test_object_payload_rejected(self, tmp_path):
        path = tmp_path / "db.json"
        path.write_text(json.dumps({"products": []}), encoding="utf-8")
        with pytest.raises(RecordSourceError, match="JSON array"):
            read_local_records(str(path))


class TestFetchRemoteRecords:
    @pytest.mark.asyncio
    async def test_returns_array(self):
        async with mock_client(lambda req: httpx.Response(200, json=[{"title": "a"}])) as client:
            data = await fetch_remote_records("https://data.example/db.json", client=client)
        assert data == [{"title": "a"}]

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        async with mock_client(lambda req: httpx.Response(503, text="down")) as client:
            with pytest.raises(RecordSourceError, match="503"):
                await fetch_remote_records("https://data.example/db.json", client=client)

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        async with mock_client(lambda req: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(RecordSourceError):
                await fetch_remote_records("https://data.example/db.json", client=client)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(req):
            raise httpx.ConnectError("refused", request=req)

        async with mock_client(handler) as client:
            with pytest.raises(RecordSourceError, match="ConnectError"):
                await fetch_remote_records("https://data.example/db.json", client=client)


class TestLoadRecords:
    @pytest.mark.asyncio
    async def test_prefers_local_file(self, tmp_path, monkeypatch):
        path = tmp_path / "db.json"
        path.write_text(json.dumps([{"title": "local"}]), encoding="utf-8")
        monkeypatch.setattr(settings, "RECORDS_PATH", str(path))
        monkeypatch.setattr(settings, "RECORDS_URL", "https://data.example/db.json")
        assert await load_records() == [{"title": "local"}]

    @pytest.mark.asyncio
    async def test_no_source_configured(self, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "RECORDS_PATH", str(tmp_path / "missing.json"))
        monkeypatch.setattr(settings, "RECORDS_URL", "")
        with pytest.raises(RecordSourceError):
            await load_records()


class TestToRecords:
    def test_skips_non_objects(self, raw_catalog):
        records = to_records([raw_catalog[0], "junk", 42, None, raw_catalog[1]])
        assert [r.slug for r in records] == ["red-shoe", "blue-shoe"]


class TestRecordStore:
    @pytest.mark.asyncio
    async def test_loads_once(self, raw_catalog):
        calls = []

        async def loader():
            calls.append(1)
            return raw_catalog

        store = RecordStore(loader)
        first = await store.query(QueryRequest())
        second = await store.query(QueryRequest(page=2))
        assert len(calls) == 1
        assert first.total == second.total == len(raw_catalog)
        assert store.loaded

    @pytest.mark.asyncio
    async def test_concurrent_queries_share_one_load(self, raw_catalog):
        calls = []
        release = asyncio.Event()

        async def loader():
            calls.append(1)
            await release.wait()
            return raw_catalog

        store = RecordStore(loader)
        tasks = [asyncio.create_task(store.query(QueryRequest())) for _ in range(5)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*tasks)

        assert len(calls) == 1
        assert all(r.total == len(raw_catalog) for r in results)

    @pytest.mark.asyncio
    async def test_failed_load_yields_empty_result(self):
        async def loader():
            raise RecordSourceError("unreachable")

        store = RecordStore(loader)
        result = await store.query(QueryRequest(search="shoe"))
        assert result.data == []
        assert result.total == 0
        assert not store.loaded

    @pytest.mark.asyncio
    async def test_unexpected_loader_error_is_contained(self):
        async def loader():
            raise RuntimeError("boom")

        store = RecordStore(loader)
        result = await store.query(QueryRequest())
        assert result.total == 0

    @pytest.mark.asyncio
    async def test_retries_after_failure(self, raw_catalog):
        outcomes = [RecordSourceError("first try fails"), raw_catalog]

        async def loader():
            nxt = outcomes.pop(0)
            if isinstance(nxt, Exception):
                raise nxt
            return nxt

        store = RecordStore(loader)
        assert (await store.query(QueryRequest())).total == 0
        assert (await store.query(QueryRequest())).total == len(raw_catalog)
        assert outcomes == []
