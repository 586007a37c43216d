# repository/metadata_repository.py
import asyncio
import logging
import os
import secrets
import tempfile
import weakref
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Dict, FrozenSet, Iterable, List, Optional
from fastapi.concurrency import run_in_threadpool
from model.store import AssetRecord, Bundle, MetadataDocument, Store
from util.enums import ErrorMessage, Platform
from util.errors import AlreadyExistsError, NotFoundError, StorageError
from util.functions import new_id

logger = logging.getLogger(__name__)


class MetadataRepository:
    """
    Flow:
    - One JSON document holds every store (token + ordered bundles) and the
      set of known asset hashes.
    - Reads are served from memory. Each mutation works on a copy, rewrites
      the whole document atomically (temp file + rename) and only then swaps
      the copy in, so memory always matches disk.
    - Mutations are serialized by one lock; store_lock() gives callers a
      per-store lock for multi-step sequences (evict + add, delete store).
    """

    def __init__(self, db_path: str, seed: Optional[MetadataDocument] = None) -> None:
        self._path = Path(db_path)
        self._lock = asyncio.Lock()
        self._store_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )
        if self._path.exists():
            self._doc = MetadataDocument.model_validate_json(self._path.read_bytes())
            logger.info(
                "metadata.loaded path=%s stores=%d assets=%d",
                self._path,
                len(self._doc.stores),
                len(self._doc.assets),
            )
        else:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            doc = (seed or MetadataDocument()).model_copy(deep=True)
            self._write(doc)
            self._doc = doc
            logger.info("metadata.created path=%s", self._path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def data(self) -> MetadataDocument:
        return self._doc.model_copy(deep=True)

    # ---------------- Persistence ----------------

    def _write(self, doc: MetadataDocument) -> None:
        payload = doc.model_dump_json()
        temp_name: Optional[str] = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=str(self._path.parent), delete=False
            ) as handle:
                temp_name = handle.name
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            Path(temp_name).replace(self._path)
        except OSError:
            if temp_name:
                Path(temp_name).unlink(missing_ok=True)
            raise

    @asynccontextmanager
    async def _mutate(self) -> AsyncIterator[MetadataDocument]:
        async with self._lock:
            doc = self._doc.model_copy(deep=True)
            yield doc
            try:
                await run_in_threadpool(self._write, doc)
            except OSError:
                logger.error("metadata.write.error path=%s", self._path, exc_info=True)
                raise StorageError.of(ErrorMessage.STORAGE_ERROR)
            self._doc = doc

    def store_lock(self, store_id: str) -> asyncio.Lock:
        lock = self._store_locks.get(store_id)
        if lock is None:
            lock = self._store_locks[store_id] = asyncio.Lock()
        return lock

    # ---------------- Stores ----------------

    @staticmethod
    def _require_store(doc: MetadataDocument, store_id: str) -> Store:
        store = doc.stores.get(store_id)
        if store is None:
            raise NotFoundError.of(ErrorMessage.STORE_NOT_FOUND, store_id)
        return store

    def has_store(self, store_id: str) -> bool:
        return store_id in self._doc.stores

    def get_store(self, store_id: str) -> Store:
        return self._require_store(self._doc, store_id).model_copy(deep=True)

    def list_stores(self) -> Dict[str, Store]:
        return self.data.stores

    def find_store_by_access_key(self, access_key: str) -> Store:
        for store in self._doc.stores.values():
            if secrets.compare_digest(store.accessKey.encode(), access_key.encode()):
                return store.model_copy(deep=True)
        raise NotFoundError.of(ErrorMessage.STORE_NOT_FOUND_FOR_KEY, access_key)

    async def create_store(self, store_id: str) -> Store:
        async with self._mutate() as doc:
            if store_id in doc.stores:
                raise AlreadyExistsError.of(ErrorMessage.STORE_EXISTS, store_id)
            store = Store(id=store_id, accessKey=new_id(), bundles=[])
            doc.stores[store_id] = store
        logger.info("metadata.store.created store=%s", store_id)
        return store.model_copy(deep=True)

    async def delete_store(self, store_id: str) -> Store:
        async with self._mutate() as doc:
            store = self._require_store(doc, store_id)
            del doc.stores[store_id]
        logger.info("metadata.store.deleted store=%s", store_id)
        return store

    # ---------------- Bundles ----------------

    def is_store_empty(self, store_id: str, platform: Optional[Platform] = None) -> bool:
        bundles = self._require_store(self._doc, store_id).bundles
        if platform is None:
            return not bundles
        return not any(b.platform == platform for b in bundles)

    def has_bundle(self, store_id: str, bundle_id: str) -> bool:
        store = self._require_store(self._doc, store_id)
        return any(b.id == bundle_id for b in store.bundles)

    def list_bundles(
        self, store_id: str, platform: Optional[Platform] = None
    ) -> List[Bundle]:
        store = self._require_store(self._doc, store_id)
        return [
            b.model_copy()
            for b in store.bundles
            if platform is None or b.platform == platform
        ]

    def get_bundle(self, store_id: str, bundle_id: str) -> Bundle:
        store = self._require_store(self._doc, store_id)
        for bundle in store.bundles:
            if bundle.id == bundle_id:
                return bundle.model_copy()
        raise NotFoundError.of(ErrorMessage.BUNDLE_NOT_FOUND, bundle_id, store_id)

    def get_latest_bundle(self, store_id: str, platform: Platform) -> Bundle:
        """Last inserted bundle of `platform`; insertion order, not timestamps."""
        store = self._require_store(self._doc, store_id)
        for bundle in reversed(store.bundles):
            if bundle.platform == platform:
                return bundle.model_copy()
        raise NotFoundError.of(
            ErrorMessage.NO_BUNDLE_FOR_PLATFORM, store_id, Platform(platform).value
        )

    async def add_bundle(self, store_id: str, bundle: Bundle) -> Bundle:
        async with self._mutate() as doc:
            self._require_store(doc, store_id).bundles.append(bundle.model_copy())
        logger.info("metadata.bundle.added store=%s bundle=%s", store_id, bundle.id)
        return bundle

    async def remove_bundle(self, store_id: str, bundle_id: str) -> Bundle:
        async with self._mutate() as doc:
            store = self._require_store(doc, store_id)
            idx = next(
                (i for i, b in enumerate(store.bundles) if b.id == bundle_id), None
            )
            if idx is None:
                raise NotFoundError.of(ErrorMessage.BUNDLE_NOT_FOUND, bundle_id, store_id)
            removed = store.bundles.pop(idx)
        logger.info("metadata.bundle.removed store=%s bundle=%s", store_id, bundle_id)
        return removed

    # ---------------- Assets ----------------

    def known_asset_hashes(self) -> FrozenSet[str]:
        return frozenset(self._doc.assets)

    async def record_asset_hashes(self, hashes: Iterable[str]) -> List[str]:
        """Union `hashes` into the known set with a single write. Returns the new ones."""
        added: List[str] = []
        async with self._mutate() as doc:
            for h in hashes:
                if h not in doc.assets:
                    doc.assets[h] = AssetRecord()
                    added.append(h)
        logger.info("metadata.assets.recorded new=%d", len(added))
        return added
