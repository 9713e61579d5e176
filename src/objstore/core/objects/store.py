"""Cached object store over a durable storage backend."""

import asyncio
import time
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from objstore.core.objects.storage import ObjectStorage, validate_key
from objstore.exceptions import (
    DurableListError,
    DurableReadError,
    DurableWriteError,
    ObjectAlreadyExistsError,
)
from objstore.observability.logging import get_logger
from objstore.observability.metrics import metrics_registry

logger = get_logger(__name__)


@dataclass(frozen=True)
class StoredObject:
    """An immutable named blob."""

    key: str
    body: bytes

    @property
    def size(self) -> int:
        return len(self.body)


class ObjectListing(BaseModel):
    """One entry of a store listing."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    in_cache: bool = Field(alias="inCache")


class ObjectStore:
    """Write-through, read-through memory cache over durable storage.

    Every public method acquires the same lock for its whole duration,
    durable I/O included, so all storage operations are serialized. The cache
    only ever holds bodies that were durably written or durably read.
    """

    def __init__(self, storage: ObjectStorage):
        self._storage = storage
        self._cache: dict[str, StoredObject] = {}
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0

    async def save(self, key: str, data: bytes) -> StoredObject:
        """Store a new object.

        Args:
            key: Object key
            data: Object body, may be empty

        Returns:
            The stored object

        Raises:
            InvalidObjectKeyError: If the key is empty or unsafe
            ObjectAlreadyExistsError: If the key is cached or durably stored
            DurableWriteError: If the durable write fails; nothing is cached
        """
        validate_key(key)
        start_time = time.time()
        outcome = "error"
        try:
            async with self._lock:
                if key in self._cache:
                    outcome = "conflict"
                    raise ObjectAlreadyExistsError(key)
                try:
                    if await self._storage.exists(key):
                        outcome = "conflict"
                        raise ObjectAlreadyExistsError(key)
                    metadata = await self._storage.put(key, data)
                except FileExistsError as e:
                    outcome = "conflict"
                    raise ObjectAlreadyExistsError(key) from e
                except OSError as e:
                    raise DurableWriteError(key, e) from e

                obj = StoredObject(key=key, body=bytes(data))
                self._cache[key] = obj
                outcome = "saved"
        finally:
            metrics_registry.record_object_operation(
                "save", outcome, time.time() - start_time
            )

        logger.info("Object saved", key=metadata.key, size=metadata.size)
        return obj

    async def load(self, key: str) -> bytes | None:
        """Fetch an object body, populating the cache on a durable hit.

        Returns:
            The object body, or None if no such object exists

        Raises:
            InvalidObjectKeyError: If the key is empty or unsafe
            DurableReadError: If the durable read fails for any other reason
        """
        validate_key(key)
        start_time = time.time()
        outcome = "error"
        try:
            async with self._lock:
                cached = self._cache.get(key)
                metrics_registry.record_cache_lookup(hit=cached is not None)
                if cached is not None:
                    self._hits += 1
                    outcome = "hit"
                    return cached.body

                self._misses += 1
                try:
                    body = await self._storage.get(key)
                except FileNotFoundError:
                    outcome = "not_found"
                    return None
                except OSError as e:
                    raise DurableReadError(key, e) from e

                self._cache[key] = StoredObject(key=key, body=body)
                outcome = "loaded"
                logger.debug("Object cached from durable storage", key=key)
                return body
        finally:
            metrics_registry.record_object_operation(
                "load", outcome, time.time() - start_time
            )

    async def list_objects(self) -> list[ObjectListing]:
        """List every known object with its cache residency.

        Raises:
            DurableListError: If durable storage cannot be enumerated
        """
        start_time = time.time()
        outcome = "error"
        try:
            async with self._lock:
                try:
                    durable_keys = await self._storage.list_keys()
                except OSError as e:
                    raise DurableListError(cause=e) from e

                names = set(durable_keys) | set(self._cache)
                listing = [
                    ObjectListing(name=name, in_cache=name in self._cache)
                    for name in sorted(names)
                ]
                outcome = "listed"
                return listing
        finally:
            metrics_registry.record_object_operation(
                "list", outcome, time.time() - start_time
            )

    async def stats(self) -> dict[str, int]:
        """Cache statistics."""
        async with self._lock:
            return {
                "cached_objects": len(self._cache),
                "hits": self._hits,
                "misses": self._misses,
            }
