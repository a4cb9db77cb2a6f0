"""
Domain record stores.

``DomainStore`` is the narrow persistence contract the lifecycle service
depends on. Two implementations ship: an in-memory store and a Redis store
mirroring the key layout of the rest of the platform. Neither serializes
concurrent updates for the same hostname; last write wins.
"""

import json
import logging
from typing import Dict, Optional, Protocol, runtime_checkable

import redis.asyncio as redis

from .errors import DomainError
from .models import DomainRecord, normalize_hostname

logger = logging.getLogger("edge_domains.domains.store")


@runtime_checkable
class DomainStore(Protocol):
    """Persistence contract: one record per normalized hostname."""

    async def lookup(self, hostname: str) -> Optional[DomainRecord]:
        ...

    async def create(self, record: DomainRecord) -> DomainRecord:
        ...

    async def update(self, record: DomainRecord) -> DomainRecord:
        ...


class InMemoryDomainStore:
    """
    Process-local store.

    Records are kept serialized so nothing handed out by the store aliases
    what it holds.
    """

    def __init__(self):
        self._records: Dict[str, dict] = {}

    async def lookup(self, hostname: str) -> Optional[DomainRecord]:
        data = self._records.get(normalize_hostname(hostname))
        if data is None:
            return None
        return DomainRecord.from_dict(data)

    async def create(self, record: DomainRecord) -> DomainRecord:
        key = normalize_hostname(record.hostname)
        self._records[key] = record.to_dict()
        logger.debug(f"Stored domain: {key}")
        return DomainRecord.from_dict(self._records[key])

    async def update(self, record: DomainRecord) -> DomainRecord:
        key = normalize_hostname(record.hostname)
        if key not in self._records:
            raise DomainError.not_found(record.hostname)
        self._records[key] = record.to_dict()
        logger.debug(f"Updated domain: {key}")
        return DomainRecord.from_dict(self._records[key])

    def __len__(self) -> int:
        return len(self._records)


class RedisDomainStore:
    """Store backed by Redis, one JSON document per hostname."""

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        key_prefix: str = "edge_domains:",
        client: Optional["redis.Redis"] = None,
    ):
        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self._redis: Optional[redis.Redis] = client

    async def _get_redis(self) -> "redis.Redis":
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            logger.info("Domain store connected to Redis")
        return self._redis

    def _domain_key(self, hostname: str) -> str:
        return f"{self.key_prefix}domain:{normalize_hostname(hostname)}"

    async def lookup(self, hostname: str) -> Optional[DomainRecord]:
        r = await self._get_redis()
        data = await r.get(self._domain_key(hostname))
        if not data:
            return None
        return DomainRecord.from_dict(json.loads(data))

    async def create(self, record: DomainRecord) -> DomainRecord:
        r = await self._get_redis()
        await r.set(self._domain_key(record.hostname), json.dumps(record.to_dict()))
        logger.info(f"Stored domain: {record.hostname}")
        return record

    async def update(self, record: DomainRecord) -> DomainRecord:
        r = await self._get_redis()
        key = self._domain_key(record.hostname)
        # xx: only overwrite an existing key
        written = await r.set(key, json.dumps(record.to_dict()), xx=True)
        if not written:
            raise DomainError.not_found(record.hostname)
        logger.info(f"Updated domain: {record.hostname}")
        return record

    async def close(self) -> None:
        """Close Redis connection."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            logger.info("Domain store Redis connection closed")
