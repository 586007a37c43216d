import io
import json
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional

import pytest
from fastapi.testclient import TestClient

from config.settings import Settings
from config.store_context import StoreContext, open_store_context
from main import create_app

# Generated line 87771 maps to src/App.js:10:4 ("AASI" = col 0, src 0, line +9, col +4)
APP_MAP_LINE = 87771
APP_MAP = {
    "version": 3,
    "sources": ["src/App.js"],
    "names": [],
    "mappings": ";" * (APP_MAP_LINE - 1) + "AASI",
}


def make_settings(root: Path, **overrides) -> Settings:
    return Settings(STORE_PATH=str(root / "store"), **overrides)


def make_zip(entries: Dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buf.getvalue()


def source_map_json(mappings: str, sources: Optional[List[str]] = None, **extra) -> str:
    payload = {"version": 3, "sources": sources or ["App.js"], "names": [], "mappings": mappings}
    payload.update(extra)
    return json.dumps(payload)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def ctx(settings: Settings) -> StoreContext:
    return open_store_context(settings)


@pytest.fixture
def make_client(tmp_path: Path):
    @contextmanager
    def _make(**overrides) -> Iterator[TestClient]:
        app = create_app(make_settings(tmp_path, **overrides))
        with TestClient(app) as client:
            yield client

    return _make


@pytest.fixture
def client(make_client) -> Iterator[TestClient]:
    with make_client() as c:
        yield c
