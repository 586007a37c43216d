# routes.py
from fastapi import FastAPI
from controller.asset_controller import asset_router
from controller.bundle_controller import bundle_router
from controller.store_controller import store_router
from controller.symbolication_controller import symbolication_router


def register_routes(app: FastAPI) -> None:
    """Register & Access control controllers here."""
    app.include_router(bundle_router)
    app.include_router(store_router)
    app.include_router(asset_router)
    app.include_router(symbolication_router)
