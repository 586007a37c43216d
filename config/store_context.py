# config/store_context.py
from dataclasses import dataclass
from typing import Optional
from fastapi import Request
from config.settings import Settings
from model.store import MetadataDocument
from repository.blob_repository import BlobRepository
from repository.metadata_repository import MetadataRepository


@dataclass
class StoreContext:
    """Everything a request needs to reach the store: settings, metadata, blob roots."""

    settings: Settings
    metadata: MetadataRepository
    bundles: BlobRepository
    sourcemaps: BlobRepository
    assets: BlobRepository


def open_store_context(
    settings: Settings, seed: Optional[MetadataDocument] = None
) -> StoreContext:
    """
    Create blob roots and load (or seed) the metadata document.
    Raises if a root is not writable; startup should abort on that.
    """
    bundles = BlobRepository(settings.bundles_dir)
    sourcemaps = BlobRepository(settings.sourcemaps_dir)
    assets = BlobRepository(settings.assets_dir)
    for repo in (bundles, sourcemaps, assets):
        repo.ensure_root()
    metadata = MetadataRepository(settings.db_path, seed=seed)
    return StoreContext(
        settings=settings,
        metadata=metadata,
        bundles=bundles,
        sourcemaps=sourcemaps,
        assets=assets,
    )


def get_store_context(request: Request) -> StoreContext:
    return request.app.state.store_context
