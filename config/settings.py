# config/settings.py
import os
import sys
from typing import Optional
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from repository.namespaces import ASSETS, BUNDLES, DB_FILE, SOURCEMAPS
from util.enums import Environment
import logging


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()

_log = logging.getLogger("config.settings")


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(default=Environment.DEV.value, validation_alias="APP_ENV")
    HOST: str = Field(default="127.0.0.1", validation_alias="HOST")
    PORT: int = Field(default=3000, validation_alias="PORT")

    # Store layout
    STORE_PATH: str = Field(
        default=os.path.join(os.getcwd(), "store"), validation_alias="STORE_PATH"
    )
    DB_PATH: Optional[str] = Field(default=None, validation_alias="DB_PATH")
    BUNDLES_DIR: Optional[str] = Field(default=None, validation_alias="BUNDLES_DIR")
    SOURCEMAPS_DIR: Optional[str] = Field(
        default=None, validation_alias="SOURCEMAPS_DIR"
    )
    ASSETS_DIR: Optional[str] = Field(default=None, validation_alias="ASSETS_DIR")

    # Retention: bundles kept per store, <= 0 keeps everything
    MAX_BUNDLES: int = Field(default=-1, validation_alias="MAX_BUNDLES")

    # CORS & Limits
    ALLOWED_ORIGIN: str = Field(default="*", validation_alias="ALLOWED_ORIGIN")
    MAX_FILE_MB: int = Field(default=100, validation_alias="MAX_FILE_MB")

    # Logging knobs
    LOGGER_NAME: str = "bundle-store"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")

    @property
    def db_path(self) -> str:
        return self.DB_PATH or os.path.join(self.STORE_PATH, DB_FILE)

    @property
    def bundles_dir(self) -> str:
        return self.BUNDLES_DIR or os.path.join(self.STORE_PATH, BUNDLES)

    @property
    def sourcemaps_dir(self) -> str:
        return self.SOURCEMAPS_DIR or os.path.join(self.STORE_PATH, SOURCEMAPS)

    @property
    def assets_dir(self) -> str:
        return self.ASSETS_DIR or os.path.join(self.STORE_PATH, ASSETS)


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
