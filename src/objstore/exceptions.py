"""Exception hierarchy for objstore."""


class ObjectStoreError(Exception):
    """Base exception for all objstore errors."""


class InvalidObjectKeyError(ObjectStoreError):
    """Raised when an object key is empty or escapes the storage root."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid object key {key!r}: {reason}")


class ObjectAlreadyExistsError(ObjectStoreError):
    """Raised when saving a key that is already cached or durably stored."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Object {key} already exists")


class DurableLayerError(ObjectStoreError):
    """Base for I/O failures reported by the durable storage backend."""

    operation: str

    def __init__(self, key: str | None = None, cause: BaseException | None = None):
        self.key = key
        self.cause = cause
        target = f"object {key}" if key is not None else "storage root"
        message = f"Failed to {self.operation} {target}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class DurableWriteError(DurableLayerError):
    """Raised when an object cannot be written to durable storage."""

    operation = "write"


class DurableReadError(DurableLayerError):
    """Raised when durable storage fails for a reason other than a missing object."""

    operation = "read"


class DurableListError(DurableLayerError):
    """Raised when durable storage cannot be enumerated."""

    operation = "list"
