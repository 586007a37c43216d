# controller/store_controller.py
from typing import List, Optional, Union
from fastapi import APIRouter, Depends, Header, Query, status
from controller.controller_dependencies import get_store_service
from model.store import Store
from service.store_service import StoreService
from util.constants import ACCESS_KEY_HEADER, InternalURIs

store_router = APIRouter()


@store_router.post(
    InternalURIs.STORE,
    response_model=Store,
    status_code=status.HTTP_201_CREATED,
)
async def create_store(
    store_id: str, service: StoreService = Depends(get_store_service)
) -> Store:
    return await service.create_store(store_id)


@store_router.delete(InternalURIs.STORE, response_model=Store)
async def delete_store(
    store_id: str,
    access_key: Optional[str] = Header(default=None, alias=ACCESS_KEY_HEADER),
    service: StoreService = Depends(get_store_service),
) -> Store:
    return await service.delete_store(store_id, access_key)


@store_router.get(InternalURIs.STORES)
async def list_stores(
    accessKey: Optional[str] = Query(default=None),
    service: StoreService = Depends(get_store_service),
) -> Union[Store, List[str]]:
    """Store ids, or the one store owning `accessKey` when given."""
    if accessKey:
        return service.get_store_by_access_key(accessKey)
    return service.list_store_ids()
