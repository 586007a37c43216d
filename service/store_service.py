# service/store_service.py
import logging
import secrets
from typing import List, Optional
from model.store import Store
from repository.blob_repository import BlobRepository
from repository.metadata_repository import MetadataRepository
from util.constants import ACCESS_KEY_HEADER
from util.enums import ErrorMessage
from util.errors import ForbiddenError, StorageError, UnauthorizedError

logger = logging.getLogger(__name__)


class StoreService:
    """
    Store (namespace) lifecycle: creation, token checks, lookup and deletion
    together with every blob the store owns.
    """

    def __init__(
        self,
        metadata: MetadataRepository,
        bundles: BlobRepository,
        sourcemaps: BlobRepository,
    ) -> None:
        self._metadata = metadata
        self._bundles = bundles
        self._sourcemaps = sourcemaps

    def get_store(self, store_id: str) -> Store:
        return self._metadata.get_store(store_id)

    def list_store_ids(self) -> List[str]:
        return list(self._metadata.list_stores())

    def get_store_by_access_key(self, access_key: str) -> Store:
        return self._metadata.find_store_by_access_key(access_key)

    @staticmethod
    def check_access_key(store: Store, access_key: Optional[str]) -> None:
        if not access_key:
            raise UnauthorizedError.of(ErrorMessage.MISSING_ACCESS_KEY, ACCESS_KEY_HEADER)
        if not secrets.compare_digest(store.accessKey.encode(), access_key.encode()):
            logger.warning("store.access.denied store=%s", store.id)
            raise ForbiddenError.of(ErrorMessage.INVALID_ACCESS_KEY)

    async def create_store(self, store_id: str) -> Store:
        store = await self._metadata.create_store(store_id)
        logger.info("store.create.ok store=%s", store_id)
        return store

    async def delete_store(self, store_id: str, access_key: Optional[str]) -> Store:
        """
        Drop every bundle and source map blob of the store, then its record.
        Blobs go first so a crash never leaves a record pointing at nothing.
        """
        async with self._metadata.store_lock(store_id):
            store = self._metadata.get_store(store_id)
            self.check_access_key(store, access_key)
            failed = 0
            for bundle in store.bundles:
                for blobs, key in (
                    (self._bundles, bundle.id),
                    (self._sourcemaps, bundle.sourceMap),
                ):
                    try:
                        await blobs.delete(key)
                    except OSError:
                        failed += 1
                        logger.error(
                            "store.delete.blob.error store=%s bundle=%s blob=%s",
                            store_id,
                            bundle.id,
                            key,
                        )
            # Keep the record while any of its blobs is still on disk
            if failed:
                raise StorageError.of(ErrorMessage.STORAGE_ERROR)
            removed = await self._metadata.delete_store(store_id)
        logger.info("store.delete.ok store=%s bundles=%d", store_id, len(store.bundles))
        return removed
