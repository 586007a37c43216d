# controller/asset_controller.py
import mimetypes
from typing import List
from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from fastapi.responses import StreamingResponse
from config.store_context import StoreContext, get_store_context
from controller.controller_dependencies import (
    enforce_max_upload_size,
    get_asset_service,
    read_upload,
)
from model.api import DeltaRequest
from service.asset_service import AssetService
from util.constants import InternalURIs

asset_router = APIRouter()


@asset_router.post(
    InternalURIs.ASSETS,
    response_model=List[str],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(enforce_max_upload_size)],
)
async def upload_assets(
    assets: UploadFile = File(...),
    service: AssetService = Depends(get_asset_service),
    ctx: StoreContext = Depends(get_store_context),
) -> List[str]:
    archive = await read_upload(assets, ctx.settings.MAX_FILE_MB)
    return await service.upload_assets(archive)


@asset_router.post(InternalURIs.ASSETS_DELTA, response_model=List[str])
async def assets_delta(
    payload: DeltaRequest, service: AssetService = Depends(get_asset_service)
) -> List[str]:
    return service.compute_delta(payload.assets)


@asset_router.get(InternalURIs.ASSET_FILE)
async def get_asset(
    asset_path: str,
    asset_hash: str = Query(..., alias="hash"),
    service: AssetService = Depends(get_asset_service),
):
    media_type, _ = mimetypes.guess_type(asset_path)
    return StreamingResponse(
        service.open_asset(asset_hash, asset_path),
        media_type=media_type or "application/octet-stream",
    )
