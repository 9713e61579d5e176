"""Durable object storage backends.

The durable layer holds the authoritative copy of every saved object. The
local backend keeps one file per object, named exactly after its key, under a
single root directory. There is no metadata sidecar or checksum.
"""

from abc import ABC, abstractmethod
from pathlib import Path

import aiofiles
import aiofiles.os
from pydantic import BaseModel

from objstore.config import LocalFileStorageConfig
from objstore.exceptions import InvalidObjectKeyError


class ObjectMetadata(BaseModel):
    """Metadata for a stored object."""

    key: str
    size: int


MAX_KEY_BYTES = 255


def validate_key(key: str) -> str:
    """Reject keys that are empty, overlong or could escape a flat storage root."""
    if not key:
        raise InvalidObjectKeyError(key, "key must not be empty")
    if key in (".", ".."):
        raise InvalidObjectKeyError(key, "key must not be a relative path segment")
    if "/" in key or "\\" in key:
        raise InvalidObjectKeyError(key, "key must not contain path separators")
    if "\x00" in key:
        raise InvalidObjectKeyError(key, "key must not contain NUL bytes")
    if len(key.encode("utf-8")) > MAX_KEY_BYTES:
        raise InvalidObjectKeyError(
            key, f"key must not exceed {MAX_KEY_BYTES} bytes as UTF-8"
        )
    return key


class ObjectStorage(ABC):
    """Abstract base class for durable object storage backends.

    Backends signal a missing object with FileNotFoundError, an existing one
    on put with FileExistsError, and any other failure with OSError.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the backend (create directories, etc.)."""
        ...

    @abstractmethod
    async def put(self, key: str, content: bytes) -> ObjectMetadata:
        """Store a new object.

        Args:
            key: Object key
            content: Object content as bytes

        Returns:
            ObjectMetadata for the stored object

        Raises:
            FileExistsError: If an object with this key already exists
        """
        ...

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Retrieve object content.

        Raises:
            FileNotFoundError: If object doesn't exist
        """
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if an object exists."""
        ...

    @abstractmethod
    async def list_keys(self) -> set[str]:
        """Return the keys of every stored object."""
        ...

    async def close(self) -> None:
        """Close any open resources."""
        pass


class LocalObjectStorage(ObjectStorage):
    """Local filesystem object storage.

    Works for local development and for a mounted volume in a container.
    """

    def __init__(self, base_path: Path | str):
        self._base_path = Path(base_path)

    @property
    def base_path(self) -> Path:
        return self._base_path

    async def initialize(self) -> None:
        """Create base directory if it doesn't exist."""
        await aiofiles.os.makedirs(self._base_path, exist_ok=True)

    def _key_to_path(self, key: str) -> Path:
        return self._base_path / validate_key(key)

    async def put(self, key: str, content: bytes) -> ObjectMetadata:
        file_path = self._key_to_path(key)

        # "x" never truncates an existing object
        f = await aiofiles.open(file_path, "xb")
        try:
            async with f:
                await f.write(content)
        except OSError:
            # Failures may surface on write or on the closing flush
            try:
                await aiofiles.os.remove(file_path)
            except FileNotFoundError:
                pass
            raise

        return ObjectMetadata(key=key, size=len(content))

    async def get(self, key: str) -> bytes:
        file_path = self._key_to_path(key)
        try:
            async with aiofiles.open(file_path, "rb") as f:
                return await f.read()
        except IsADirectoryError as e:
            # Directories under the root are not objects
            raise FileNotFoundError(f"Object not found: {key}") from e

    async def exists(self, key: str) -> bool:
        return await aiofiles.os.path.exists(self._key_to_path(key))

    async def list_keys(self) -> set[str]:
        keys = set()
        for name in await aiofiles.os.listdir(self._base_path):
            if await aiofiles.os.path.isfile(self._base_path / name):
                keys.add(name)
        return keys


def create_object_storage(config: LocalFileStorageConfig) -> ObjectStorage:
    """Factory function to create object storage from config."""
    return LocalObjectStorage(base_path=config.base_path)
