"""LocalBlobStore — filesystem implementation of BlobStoreProtocol.

Layout: {root}/{container_hint}/{uuid}{ext}. Blocking file I/O runs in the
default thread pool so fetches from the merge engine overlap.
"""

import asyncio
import logging
import re
import uuid
from pathlib import Path, PurePosixPath

from config.settings import settings
from src.bp_common.errors import StorageError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_segment(value: str) -> str:
    cleaned = _UNSAFE_CHARS.sub("_", value).strip("._")
    return cleaned or "unsorted"


class LocalBlobStore:
    def __init__(self, root: str | Path | None = None) -> None:
        self._root = Path(root or settings.BLOB_ROOT).resolve()

    def _resolve(self, path: str) -> Path:
        full = (self._root / PurePosixPath(path)).resolve()
        if self._root not in full.parents:
            raise StorageError(f"path escapes blob root: {path}")
        return full

    async def store(self, data: bytes, suggested_name: str, container_hint: str) -> str:
        ext = _UNSAFE_CHARS.sub("", PurePosixPath(suggested_name).suffix.lower().lstrip("."))
        rel = f"{_safe_segment(container_hint)}/{uuid.uuid4().hex}" + (f".{ext}" if ext else "")
        target = self._resolve(rel)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            raise StorageError(f"store {rel}: {e}") from e
        logger.debug("Stored blob %s (%d bytes)", rel, len(data))
        return rel

    async def fetch(self, path: str) -> bytes:
        target = self._resolve(path)
        try:
            return await asyncio.to_thread(target.read_bytes)
        except OSError as e:
            raise StorageError(f"fetch {path}: {e}") from e

    async def delete(self, path: str) -> None:
        target = self._resolve(path)
        try:
            await asyncio.to_thread(target.unlink, True)
        except OSError as e:
            raise StorageError(f"delete {path}: {e}") from e
        logger.debug("Deleted blob %s", path)
