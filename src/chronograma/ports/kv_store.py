"""Key/value storage interface."""

from typing import Protocol


class KeyValueStore(Protocol):
    """Interface for persisting opaque blobs under string keys."""

    def get(self, key: str) -> bytes | None:
        """Read the value for a key. Returns None if not found."""
        ...

    def set(self, key: str, value: bytes) -> None:
        """Write/overwrite the value for a key."""
        ...
