# controller/controller_dependencies.py
from typing import Optional
from fastapi import Depends, Header, HTTPException, Request, UploadFile
from config.store_context import StoreContext, get_store_context
from model.store import Store
from service.asset_service import AssetService
from service.bundle_service import BundleService
from service.store_service import StoreService
from service.symbolication_service import SymbolicationService
from util.constants import ACCESS_KEY_HEADER


def get_store_service(ctx: StoreContext = Depends(get_store_context)) -> StoreService:
    return StoreService(ctx.metadata, ctx.bundles, ctx.sourcemaps)


def get_bundle_service(ctx: StoreContext = Depends(get_store_context)) -> BundleService:
    return BundleService(
        ctx.metadata,
        ctx.bundles,
        ctx.sourcemaps,
        max_bundles=ctx.settings.MAX_BUNDLES,
    )


def get_asset_service(ctx: StoreContext = Depends(get_store_context)) -> AssetService:
    return AssetService(ctx.metadata, ctx.assets)


def get_symbolication_service(
    bundles: BundleService = Depends(get_bundle_service),
) -> SymbolicationService:
    return SymbolicationService(bundles)


def require_store_access(
    store_id: str,
    access_key: Optional[str] = Header(default=None, alias=ACCESS_KEY_HEADER),
    service: StoreService = Depends(get_store_service),
) -> Store:
    # 404 for an unknown store wins over token errors.
    store = service.get_store(store_id)
    service.check_access_key(store, access_key)
    return store


def _too_large(max_mb: int) -> HTTPException:
    return HTTPException(
        status_code=413,
        detail={"ok": False, "error": "file_too_large", "maxMb": max_mb},
    )


async def enforce_max_upload_size(
    request: Request, ctx: StoreContext = Depends(get_store_context)
) -> None:
    # Fast pre-check via Content-Length if present
    max_mb = ctx.settings.MAX_FILE_MB
    cl = request.headers.get("content-length")
    if cl and cl.isdigit() and int(cl) > max_mb * 1024 * 1024:
        raise _too_large(max_mb)


async def read_upload(file: UploadFile, max_mb: int) -> bytes:
    # Hard cap while reading (works even if no Content-Length)
    max_bytes = max_mb * 1024 * 1024
    blob = await file.read(max_bytes + 1)
    if len(blob) > max_bytes:
        raise _too_large(max_mb)
    return blob
