# controller/bundle_controller.py
from typing import List
from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import StreamingResponse
from config.store_context import StoreContext, get_store_context
from controller.controller_dependencies import (
    enforce_max_upload_size,
    get_bundle_service,
    read_upload,
    require_store_access,
)
from model.store import Bundle, Store
from service.bundle_service import BundleService
from util.constants import InternalURIs
from util.enums import Platform

bundle_router = APIRouter()


@bundle_router.get(InternalURIs.BUNDLE_FILE)
async def get_bundle_file(
    store_id: str,
    platform: Platform,
    bundle_id: str,
    service: BundleService = Depends(get_bundle_service),
):
    bundle = service.resolve_bundle(store_id, bundle_id, platform)
    return StreamingResponse(
        service.open_bundle(bundle), media_type="application/javascript"
    )


@bundle_router.get(InternalURIs.SOURCE_MAP_FILE)
async def get_source_map_file(
    store_id: str,
    platform: Platform,
    bundle_id: str,
    service: BundleService = Depends(get_bundle_service),
):
    bundle = service.resolve_bundle(store_id, bundle_id, platform)
    return StreamingResponse(
        service.open_source_map(bundle), media_type="application/json"
    )


@bundle_router.post(
    InternalURIs.PLATFORM_BUNDLES,
    response_model=Bundle,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(enforce_max_upload_size)],
)
async def upload_bundle(
    platform: Platform,
    bundle: UploadFile = File(...),
    sourcemap: UploadFile = File(...),
    store: Store = Depends(require_store_access),
    service: BundleService = Depends(get_bundle_service),
    ctx: StoreContext = Depends(get_store_context),
) -> Bundle:
    max_mb = ctx.settings.MAX_FILE_MB
    bundle_bytes = await read_upload(bundle, max_mb)
    source_map_bytes = await read_upload(sourcemap, max_mb)
    return await service.ingest_bundle(
        store.id, platform, bundle_bytes, source_map_bytes
    )


@bundle_router.get(InternalURIs.STORE_BUNDLES, response_model=List[Bundle])
async def list_store_bundles(
    store_id: str, service: BundleService = Depends(get_bundle_service)
) -> List[Bundle]:
    return service.list_bundles(store_id)


@bundle_router.get(InternalURIs.PLATFORM_BUNDLES, response_model=List[Bundle])
async def list_platform_bundles(
    store_id: str,
    platform: Platform,
    service: BundleService = Depends(get_bundle_service),
) -> List[Bundle]:
    return service.list_bundles(store_id, platform)
