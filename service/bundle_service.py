# service/bundle_service.py
import logging
from typing import Iterator, List, Optional
from model.store import Bundle
from repository.blob_repository import BlobRepository
from repository.metadata_repository import MetadataRepository
from util.constants import LATEST
from util.enums import Platform
from util.functions import new_id, now_ms

logger = logging.getLogger(__name__)


class BundleService:
    def __init__(
        self,
        metadata: MetadataRepository,
        bundles: BlobRepository,
        sourcemaps: BlobRepository,
        max_bundles: int = -1,
    ) -> None:
        self._metadata = metadata
        self._bundles = bundles
        self._sourcemaps = sourcemaps
        self._max_bundles = max_bundles

    async def ingest_bundle(
        self,
        store_id: str,
        platform: Platform,
        bundle_bytes: bytes,
        source_map_bytes: bytes,
    ) -> Bundle:
        """
        Evict down to capacity, write both blobs, then append the record.
        Blobs are written before the record so a crash can orphan files but
        never leave a record without its bytes.
        """
        async with self._metadata.store_lock(store_id):
            store = self._metadata.get_store(store_id)
            count = len(store.bundles)
            while self._max_bundles > 0 and count >= self._max_bundles:
                await self._evict_oldest(store_id)
                count -= 1

            bundle_id, source_map_id = new_id(), new_id()
            await self._bundles.put(bundle_id, bundle_bytes)
            await self._sourcemaps.put(source_map_id, source_map_bytes)
            bundle = Bundle(
                id=bundle_id,
                platform=platform,
                sourceMap=source_map_id,
                timestamp=now_ms(),
            )
            await self._metadata.add_bundle(store_id, bundle)

        logger.info(
            "bundle.ingest.ok store=%s platform=%s bundle=%s bytes=%d map_bytes=%d",
            store_id,
            Platform(platform).value,
            bundle.id,
            len(bundle_bytes),
            len(source_map_bytes),
        )
        return bundle

    async def _evict_oldest(self, store_id: str) -> Bundle:
        # Eviction is store-wide: the oldest bundle goes whatever its platform.
        oldest = self._metadata.list_bundles(store_id)[0]
        # Stale files must not block new uploads; the record still goes.
        for blobs, key in (
            (self._bundles, oldest.id),
            (self._sourcemaps, oldest.sourceMap),
        ):
            try:
                await blobs.delete(key)
            except OSError:
                logger.warning(
                    "bundle.evict.blob.error store=%s bundle=%s blob=%s",
                    store_id,
                    oldest.id,
                    key,
                    exc_info=True,
                )
        removed = await self._metadata.remove_bundle(store_id, oldest.id)
        logger.info("bundle.evict.ok store=%s bundle=%s", store_id, oldest.id)
        return removed

    def resolve_bundle(self, store_id: str, bundle_id: str, platform: Platform) -> Bundle:
        if bundle_id == LATEST:
            return self._metadata.get_latest_bundle(store_id, platform)
        return self._metadata.get_bundle(store_id, bundle_id)

    def list_bundles(
        self, store_id: str, platform: Optional[Platform] = None
    ) -> List[Bundle]:
        return self._metadata.list_bundles(store_id, platform)

    def open_bundle(self, bundle: Bundle) -> Iterator[bytes]:
        return self._bundles.iter_chunks(bundle.id)

    def open_source_map(self, bundle: Bundle) -> Iterator[bytes]:
        return self._sourcemaps.iter_chunks(bundle.sourceMap)

    async def read_source_map(self, bundle: Bundle) -> str:
        return await self._sourcemaps.read_text(bundle.sourceMap)
