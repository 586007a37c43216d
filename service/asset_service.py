# service/asset_service.py
import logging
import posixpath
from typing import Iterator, List, Sequence
from fastapi.concurrency import run_in_threadpool
from core.archive import extract_asset_archive
from repository.blob_repository import BlobRepository
from repository.metadata_repository import MetadataRepository
from repository.namespaces import ARCHIVE_SUFFIX
from util.functions import new_id
from util.timing import timed

logger = logging.getLogger(__name__)


class AssetService:
    """
    Flow:
    - Clients ask for the delta of their asset hashes, then upload a zip of
      <hash>/<file> entries for the unknown ones only.
    - Hashes are trusted as sent; the server never recomputes them.
    """

    def __init__(self, metadata: MetadataRepository, assets: BlobRepository) -> None:
        self._metadata = metadata
        self._assets = assets

    async def ingest_asset_archive(self, archive_bytes: bytes) -> List[str]:
        """
        Park the upload as <uuid>.zip in the assets root, unpack it there and
        return the asset hashes in first-seen order. The zip is removed on
        every exit path.
        """
        archive_key = new_id() + ARCHIVE_SUFFIX
        archive_path = await self._assets.put(archive_key, archive_bytes)
        try:
            with timed(logger, "assets.extract", bytes=len(archive_bytes)):
                hashes = await run_in_threadpool(
                    extract_asset_archive, archive_path, self._assets.root
                )
        finally:
            await self._assets.delete(archive_key)
        return hashes

    async def upload_assets(self, archive_bytes: bytes) -> List[str]:
        hashes = await self.ingest_asset_archive(archive_bytes)
        await self._metadata.record_asset_hashes(hashes)
        logger.info("assets.upload.ok hashes=%d", len(hashes))
        return hashes

    def compute_delta(self, candidates: Sequence[str]) -> List[str]:
        known = self._metadata.known_asset_hashes()
        delta = [h for h in candidates if h not in known]
        logger.info("assets.delta candidates=%d unknown=%d", len(candidates), len(delta))
        return delta

    def open_asset(self, asset_hash: str, request_path: str) -> Iterator[bytes]:
        return self._assets.iter_chunks(asset_hash, posixpath.basename(request_path))
