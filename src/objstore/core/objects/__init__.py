"""Objects core: cached store and durable backends."""

from objstore.core.objects.storage import LocalObjectStorage, ObjectStorage
from objstore.core.objects.store import ObjectListing, ObjectStore, StoredObject

__all__ = [
    "LocalObjectStorage",
    "ObjectListing",
    "ObjectStorage",
    "ObjectStore",
    "StoredObject",
]
