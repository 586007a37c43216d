# util/constants.py
from typing import Final


class InternalURIs:
    STATUS = "/status"
    BUNDLES = "/bundles"
    STORE_BUNDLES = BUNDLES + "/{store_id}"
    PLATFORM_BUNDLES = STORE_BUNDLES + "/{platform}"
    BUNDLE_FILE = PLATFORM_BUNDLES + "/{bundle_id}/index.bundle"
    SOURCE_MAP_FILE = PLATFORM_BUNDLES + "/{bundle_id}/index.map"
    STORES = "/stores"
    STORE = STORES + "/{store_id}"
    ASSETS = "/assets"
    ASSETS_DELTA = ASSETS + "/delta"
    ASSET_FILE = ASSETS + "/{asset_path:path}"
    SYMBOLICATE = "/symbolicate"


ACCESS_KEY_HEADER: Final[str] = "ERN-BUNDLE-STORE-ACCESS-KEY"
LATEST: Final[str] = "latest"
STATUS_PAYLOAD: Final[str] = "packager-status:running"
CHUNK_SIZE: Final[int] = 64 * 1024
