"""Blob Store contract — opaque byte storage addressed by path."""

from typing import Protocol


class BlobStoreProtocol(Protocol):
    async def store(self, data: bytes, suggested_name: str, container_hint: str) -> str:
        """Persist bytes and return the opaque storage path."""
        ...

    async def fetch(self, path: str) -> bytes:
        """Raise on a missing or unreadable path."""
        ...

    async def delete(self, path: str) -> None: ...
