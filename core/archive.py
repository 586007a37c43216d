# core/archive.py
import logging
import posixpath
import shutil
import stat
import zipfile
from pathlib import Path, PurePosixPath
from typing import List
from util.enums import ErrorMessage
from util.errors import InvalidArchiveError
from util.functions import ordered_unique

logger = logging.getLogger(__name__)


def _member_path(name: str) -> Path:
    """Reject absolute or traversing entry names."""
    relative = PurePosixPath(name.replace("\\", "/"))
    if relative.is_absolute() or not relative.parts:
        raise InvalidArchiveError.of(ErrorMessage.INVALID_ARCHIVE, f"unsafe entry {name}")
    if any(part in {"", ".", ".."} for part in relative.parts):
        raise InvalidArchiveError.of(ErrorMessage.INVALID_ARCHIVE, f"unsafe entry {name}")
    return Path(*relative.parts)


def extract_asset_archive(zip_path: Path, destination: Path) -> List[str]:
    """
    Unpack an assets zip into `destination`, keeping its layout.
    Entries are laid out as <hash>/<file>; returns the parent directory of
    every file entry, deduplicated, in archive order.
    Blocking: run it off the event loop.
    """
    hashes: List[str] = []
    try:
        with zipfile.ZipFile(zip_path) as archive:
            for member in archive.infolist():
                if member.filename.endswith("/"):
                    continue
                target = destination / _member_path(member.filename)
                mode = (member.external_attr >> 16) & 0xFFFF
                if stat.S_IFMT(mode) == stat.S_IFLNK:
                    raise InvalidArchiveError.of(
                        ErrorMessage.INVALID_ARCHIVE, f"link entry {member.filename}"
                    )
                parent = posixpath.dirname(member.filename.replace("\\", "/"))
                if parent:
                    hashes.append(parent)
                target.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(member, "r") as source, target.open("wb") as out:
                    shutil.copyfileobj(source, out)
    except (zipfile.BadZipFile, NotImplementedError, RuntimeError) as e:
        # NotImplementedError: unsupported compression; RuntimeError: encrypted member
        raise InvalidArchiveError.of(ErrorMessage.INVALID_ARCHIVE, e)
    unique = ordered_unique(hashes)
    logger.info("assets.extract.ok files=%d hashes=%d", len(hashes), len(unique))
    return unique
