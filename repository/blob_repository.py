# repository/blob_repository.py
import logging
import os
from pathlib import Path
from typing import Iterator
from fastapi.concurrency import run_in_threadpool
from util.constants import CHUNK_SIZE
from util.enums import ErrorMessage
from util.errors import NotFoundError, StorageError

logger = logging.getLogger(__name__)


class BlobRepository:
    """
    Filesystem byte storage under one root directory (bundles, sourcemaps or
    assets). Keys are single path segments: server generated ids, or
    <hash>/<file> pairs for assets.
    """

    def __init__(self, root: str) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def ensure_root(self) -> None:
        self._root.mkdir(parents=True, exist_ok=True)
        if not os.access(self._root, os.W_OK):
            raise PermissionError(f"blob root {self._root} is not writable")

    def path(self, *parts: str) -> Path:
        for part in parts:
            if not part or part in (".", "..") or "/" in part or "\\" in part:
                raise NotFoundError.of(ErrorMessage.BLOB_NOT_FOUND, "/".join(parts))
        return self._root.joinpath(*parts)

    def _write(self, target: Path, data: bytes) -> None:
        tmp = target.with_name(target.name + f".tmp-{os.getpid()}")
        try:
            with open(tmp, "wb") as fh:
                fh.write(data)
            os.replace(tmp, target)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise

    async def put(self, key: str, data: bytes) -> Path:
        target = self.path(key)
        try:
            await run_in_threadpool(self._write, target, data)
        except OSError:
            logger.error("blob.write.error root=%s key=%s", self._root, key)
            raise StorageError.of(ErrorMessage.STORAGE_ERROR)
        return target

    async def read_text(self, key: str) -> str:
        target = self.path(key)
        try:
            return await run_in_threadpool(target.read_text, encoding="utf-8")
        except FileNotFoundError:
            raise NotFoundError.of(ErrorMessage.BLOB_NOT_FOUND, key)
        except OSError:
            logger.error("blob.read.error root=%s key=%s", self._root, key)
            raise StorageError.of(ErrorMessage.STORAGE_ERROR)

    def iter_chunks(self, *parts: str) -> Iterator[bytes]:
        """
        Stream a blob in CHUNK_SIZE pieces. Opens eagerly so a missing blob
        fails here rather than mid-response.
        """
        target = self.path(*parts)
        try:
            fh = open(target, "rb")
        except FileNotFoundError:
            raise NotFoundError.of(ErrorMessage.BLOB_NOT_FOUND, "/".join(parts))

        def _chunks() -> Iterator[bytes]:
            with fh:
                while True:
                    chunk = fh.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    yield chunk

        return _chunks()

    async def delete(self, key: str) -> bool:
        """Remove a blob. Returns False when it was already gone."""
        target = self.path(key)
        try:
            await run_in_threadpool(target.unlink)
        except FileNotFoundError:
            return False
        return True
