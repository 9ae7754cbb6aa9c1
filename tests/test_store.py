"""Tests for the in-memory document store."""
from datetime import datetime

import pytest

from core.errors import StoreError
from core.store import SERVER_TIMESTAMP, Filter, InMemoryDocumentStore


class TestInMemoryDocumentStore:

    @pytest.mark.asyncio
    async def test_add_assigns_id_and_server_timestamp(self, store):
        doc_id = await store.add("users/u1/chatSessions", {"title": "t", "startTime": SERVER_TIMESTAMP})

        doc = await store.get(f"users/u1/chatSessions/{doc_id}")
        assert doc.id == doc_id
        assert isinstance(doc.data["startTime"], datetime)

    @pytest.mark.asyncio
    async def test_timestamps_strictly_increase(self, store):
        for i in range(20):
            await store.add("c", {"n": i, "createdAt": SERVER_TIMESTAMP})

        docs = await store.query("c", order_by="createdAt")
        assert [d.data["n"] for d in docs] == list(range(20))
        stamps = [d.data["createdAt"] for d in docs]
        assert all(a < b for a, b in zip(stamps, stamps[1:]))

    @pytest.mark.asyncio
    async def test_query_only_direct_children(self, store):
        await store.set("users/u1", {"role": "student"})
        await store.add("users/u1/chatSessions", {"title": "nested"})

        docs = await store.query("users")
        assert [d.id for d in docs] == ["u1"]

    @pytest.mark.asyncio
    async def test_filters(self, store):
        await store.set("users/a", {"role": "teacher", "classesTaught": ["7a", "8b"]})
        await store.set("users/b", {"role": "teacher", "classesTaught": ["9c"]})
        await store.set("users/c", {"role": "student", "class": "7a"})

        docs = await store.query("users", [
            Filter("role", "==", "teacher"),
            Filter("classesTaught", "array-contains", "7a"),
        ])
        assert [d.id for d in docs] == ["a"]

    @pytest.mark.asyncio
    async def test_unknown_filter_operator(self, store):
        await store.set("users/a", {"role": "teacher"})
        with pytest.raises(StoreError):
            await store.query("users", [Filter("role", "!=", "student")])

    @pytest.mark.asyncio
    async def test_path_kind_is_checked(self, store):
        with pytest.raises(StoreError):
            await store.get("users")
        with pytest.raises(StoreError):
            await store.add("users/u1", {})
        with pytest.raises(StoreError):
            await store.set("", {})

    @pytest.mark.asyncio
    async def test_snapshot_survives_restart(self, tmp_path):
        path = tmp_path / "store.json"
        first = InMemoryDocumentStore(str(path))
        doc_id = await first.add("users/u1/chatSessions", {"subject": "Maths", "startTime": SERVER_TIMESTAMP})

        second = InMemoryDocumentStore(str(path))
        doc = await second.get(f"users/u1/chatSessions/{doc_id}")
        assert doc.data["subject"] == "Maths"
        assert isinstance(doc.data["startTime"], datetime)

    def test_corrupt_snapshot_is_ignored(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json")
        assert InMemoryDocumentStore(str(path))._docs == {}
