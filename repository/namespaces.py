# repository/namespaces.py
from typing import Final

# Entry names under STORE_PATH
DB_FILE: Final[str] = "db.json"
BUNDLES: Final[str] = "bundles"
SOURCEMAPS: Final[str] = "sourcemaps"
ASSETS: Final[str] = "assets"

ARCHIVE_SUFFIX: Final[str] = ".zip"
