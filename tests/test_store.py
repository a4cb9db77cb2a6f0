"""
Tests for the domain record stores.
"""

import dataclasses
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from edge_domains.domains.errors import DomainError, DomainErrorKind
from edge_domains.domains.models import DomainRecord, DomainStatus
from edge_domains.domains.store import DomainStore, InMemoryDomainStore, RedisDomainStore


# ── InMemoryDomainStore tests ───────────────────────────────────────


class TestInMemoryDomainStore:
    def test_satisfies_protocol(self, store):
        assert isinstance(store, DomainStore)

    @pytest.mark.asyncio
    async def test_create_and_lookup(self, store):
        record = DomainRecord(hostname="shop.example.com")
        await store.create(record)

        result = await store.lookup("shop.example.com")
        assert result == record

    @pytest.mark.asyncio
    async def test_lookup_missing(self, store):
        assert await store.lookup("missing.example.com") is None

    @pytest.mark.asyncio
    async def test_lookup_is_normalized(self, store):
        await store.create(DomainRecord(hostname="shop.example.com"))
        assert await store.lookup("  Shop.Example.COM/") is not None

    @pytest.mark.asyncio
    async def test_returns_copies(self, store):
        record = DomainRecord(hostname="shop.example.com")
        created = await store.create(record)
        first = await store.lookup("shop.example.com")
        second = await store.lookup("shop.example.com")

        assert created is not record
        assert first is not second
        assert first == second

    @pytest.mark.asyncio
    async def test_update(self, store):
        record = DomainRecord(hostname="shop.example.com")
        await store.create(record)

        updated = await store.update(
            dataclasses.replace(record, status=DomainStatus.PENDING_VERIFICATION)
        )
        assert updated.status == DomainStatus.PENDING_VERIFICATION

        result = await store.lookup("shop.example.com")
        assert result.status == DomainStatus.PENDING_VERIFICATION

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, store):
        with pytest.raises(DomainError) as exc_info:
            await store.update(DomainRecord(hostname="ghost.example.com"))
        assert exc_info.value.kind == DomainErrorKind.DOMAIN_NOT_FOUND

    @pytest.mark.asyncio
    async def test_duplicate_create_overwrites(self, store):
        await store.create(DomainRecord(hostname="shop.example.com"))
        replacement = DomainRecord(hostname="shop.example.com")
        await store.create(replacement)

        assert len(store) == 1
        assert (await store.lookup("shop.example.com")).id == replacement.id


# ── RedisDomainStore tests ──────────────────────────────────────────


class TestRedisDomainStore:
    @pytest.fixture
    def redis_client(self):
        client = MagicMock()
        client.get = AsyncMock(return_value=None)
        client.set = AsyncMock(return_value=True)
        client.aclose = AsyncMock()
        return client

    @pytest.fixture
    def redis_store(self, redis_client):
        return RedisDomainStore(key_prefix="test:", client=redis_client)

    @pytest.mark.asyncio
    async def test_create_writes_json(self, redis_store, redis_client):
        record = DomainRecord(hostname="shop.example.com")
        await redis_store.create(record)

        key, payload = redis_client.set.await_args.args
        assert key == "test:domain:shop.example.com"
        assert json.loads(payload) == record.to_dict()

    @pytest.mark.asyncio
    async def test_lookup(self, redis_store, redis_client):
        record = DomainRecord(hostname="shop.example.com")
        redis_client.get.return_value = json.dumps(record.to_dict())

        result = await redis_store.lookup("Shop.Example.com")

        redis_client.get.assert_awaited_once_with("test:domain:shop.example.com")
        assert result == record

    @pytest.mark.asyncio
    async def test_lookup_missing(self, redis_store):
        assert await redis_store.lookup("missing.example.com") is None

    @pytest.mark.asyncio
    async def test_update_only_existing(self, redis_store, redis_client):
        record = DomainRecord(hostname="shop.example.com")
        await redis_store.update(record)
        assert redis_client.set.await_args.kwargs == {"xx": True}

        redis_client.set.return_value = None
        with pytest.raises(DomainError) as exc_info:
            await redis_store.update(record)
        assert exc_info.value.kind == DomainErrorKind.DOMAIN_NOT_FOUND

    @pytest.mark.asyncio
    async def test_close(self, redis_store, redis_client):
        await redis_store.close()
        redis_client.aclose.assert_awaited_once()
        assert redis_store._redis is None

    @pytest.mark.asyncio
    async def test_lazy_connection(self):
        fake_client = MagicMock()
        fake_client.get = AsyncMock(return_value=None)

        with patch(
            "edge_domains.domains.store.redis.from_url", return_value=fake_client
        ) as from_url:
            store = RedisDomainStore(redis_url="redis://cache:6379")
            await store.lookup("shop.example.com")
            await store.lookup("shop.example.com")

        from_url.assert_called_once_with(
            "redis://cache:6379", encoding="utf-8", decode_responses=True
        )
