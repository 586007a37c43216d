# main.py
from typing import Optional
import routes
from contextlib import asynccontextmanager
from util.enums import Environment, Color
from fastapi import FastAPI, WebSocket
from fastapi.responses import StreamingResponse
from starlette.middleware.cors import CORSMiddleware
from config.settings import Settings, settings
from config.store_context import open_store_context
from model.store import MetadataDocument
from util.constants import ACCESS_KEY_HEADER, STATUS_PAYLOAD, InternalURIs
from util.logger import init_logger


def create_app(
    app_settings: Settings = settings, seed: Optional[MetadataDocument] = None
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(fastApi: FastAPI):
        try:
            init_logger(app_settings)
            print(f"{Color.GREEN}Initializing store at {app_settings.STORE_PATH}...{Color.RESET}")
            fastApi.state.store_context = open_store_context(app_settings, seed=seed)
            print(f"{Color.BLUE}Server Started{Color.RESET}")
        except Exception as e:
            print("Failed to open store:", e)
            raise

        try:
            yield
        finally:
            print(f"{Color.RED}Server Shutdown{Color.RESET}")

    app: FastAPI = FastAPI(lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[app_settings.ALLOWED_ORIGIN],
        allow_credentials=True,  # Allow cookies and other credentials
        allow_methods=["GET", "POST", "DELETE"],  # Allowed HTTP Methods
        allow_headers=["Content-Type", "Accept", ACCESS_KEY_HEADER],
    )

    @app.get(InternalURIs.STATUS)
    async def status():
        return StreamingResponse(iter([STATUS_PAYLOAD]), media_type="text/plain")

    @app.websocket("/{path:path}")
    async def swallow_socket(websocket: WebSocket, path: str):
        # Packager clients open sockets (hot reload, logs); accept and ignore.
        await websocket.accept()
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break

    routes.register_routes(app)
    return app


app: FastAPI = create_app()

if __name__ == "__main__":
    import uvicorn

    reload = settings.APP_ENV == Environment.DEV
    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT, reload=reload)
