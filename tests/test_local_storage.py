"""Tests for the local filesystem object storage."""

import errno

import pytest
from aiofiles.threadpool.binary import AsyncBufferedIOBase

from objstore.config import LocalFileStorageConfig
from objstore.core.objects.storage import (
    LocalObjectStorage,
    create_object_storage,
    validate_key,
)
from objstore.core.objects.store import ObjectStore
from objstore.exceptions import DurableWriteError, InvalidObjectKeyError


@pytest.fixture
async def storage(tmp_path):
    storage = LocalObjectStorage(base_path=tmp_path / "root")
    await storage.initialize()
    return storage


async def test_initialize_creates_root(tmp_path):
    storage = LocalObjectStorage(base_path=tmp_path / "nested" / "root")

    await storage.initialize()
    await storage.initialize()

    assert (tmp_path / "nested" / "root").is_dir()


async def test_put_and_get(storage):
    metadata = await storage.put("blob.bin", b"\x00\x01\x02")

    assert metadata.key == "blob.bin"
    assert metadata.size == 3
    assert await storage.get("blob.bin") == b"\x00\x01\x02"
    assert await storage.exists("blob.bin")


async def test_put_never_overwrites(storage):
    await storage.put("once", b"first")

    with pytest.raises(FileExistsError):
        await storage.put("once", b"second")

    assert await storage.get("once") == b"first"


async def test_get_missing_raises_file_not_found(storage):
    with pytest.raises(FileNotFoundError):
        await storage.get("nope")
    assert not await storage.exists("nope")


async def test_list_keys_skips_directories(storage):
    await storage.put("a", b"1")
    await storage.put("b", b"2")
    (storage.base_path / "subdir").mkdir()

    assert await storage.list_keys() == {"a", "b"}


async def test_list_keys_missing_root(tmp_path):
    storage = LocalObjectStorage(base_path=tmp_path / "absent")

    with pytest.raises(OSError):
        await storage.list_keys()


@pytest.fixture
def disk_full(monkeypatch):
    """Make every aiofiles binary write fail as if the device were full."""

    async def failing_write(self, data):
        raise OSError(errno.ENOSPC, "No space left on device")

    monkeypatch.setattr(AsyncBufferedIOBase, "write", failing_write)
    return monkeypatch


async def test_failed_write_removes_partial_file(storage, disk_full):
    with pytest.raises(OSError):
        await storage.put("big", b"x" * 200 * 1024)

    assert not (storage.base_path / "big").exists()
    assert await storage.list_keys() == set()


async def test_failed_write_leaves_key_free_for_a_later_save(storage, disk_full):
    with pytest.raises(DurableWriteError):
        await ObjectStore(storage).save("big", b"x" * 200 * 1024)

    disk_full.undo()
    fresh = ObjectStore(storage)

    assert await fresh.load("big") is None
    await fresh.save("big", b"retry")
    assert (storage.base_path / "big").read_bytes() == b"retry"


async def test_directory_under_root_is_not_an_object(storage):
    (storage.base_path / "sub").mkdir()

    with pytest.raises(FileNotFoundError):
        await storage.get("sub")
    assert await ObjectStore(storage).load("sub") is None


async def test_unsafe_key_never_touches_disk(storage, tmp_path):
    with pytest.raises(InvalidObjectKeyError):
        await storage.put("../escaped", b"x")

    assert not (tmp_path / "escaped").exists()


@pytest.mark.parametrize(
    "key", ["report.txt", "with space", ".hidden", "ünïcode", "k" * 255]
)
def test_validate_key_accepts_plain_names(key):
    assert validate_key(key) == key


@pytest.mark.parametrize(
    "key",
    ["", ".", "..", "/abs", "a/b", "a\\b", "nul\x00", "k" * 256, "é" * 128],
)
def test_validate_key_rejects(key):
    with pytest.raises(InvalidObjectKeyError):
        validate_key(key)


def test_create_object_storage_from_config(tmp_path):
    storage = create_object_storage(LocalFileStorageConfig(base_path=tmp_path))

    assert isinstance(storage, LocalObjectStorage)
    assert storage.base_path == tmp_path
