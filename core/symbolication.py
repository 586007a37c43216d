# core/symbolication.py
import re
import logging
from typing import List, Optional, Sequence
from core.source_map import SourceMap, SourceMapError
from model.api import BundleReference, StackFrame
from util.enums import ErrorMessage, Platform
from util.errors import InvalidSymbolMapError, MalformedReferenceError
from util.functions import is_http_url
from util.timing import timed

logger = logging.getLogger(__name__)

BUNDLE_URL_RE = re.compile(r"bundles/([^/]+)/([^/]+)/([^/]+)/")


def extract_bundle_reference(bundle_url: str) -> BundleReference:
    """
    Pull (store, platform, bundle) out of a frame file url such as
    http://host/bundles/<store>/<platform>/<bundle>/index.bundle?...
    """
    match = BUNDLE_URL_RE.search(bundle_url or "")
    if match is None:
        raise MalformedReferenceError.of(ErrorMessage.MALFORMED_REFERENCE, bundle_url)
    store_id, platform, bundle_id = match.groups()
    try:
        return BundleReference(
            store_id=store_id, platform=Platform(platform), bundle_id=bundle_id
        )
    except ValueError:
        raise MalformedReferenceError.of(ErrorMessage.MALFORMED_REFERENCE, bundle_url)


def is_mappable(frame: StackFrame) -> bool:
    return (
        is_http_url(frame.file)
        and frame.lineNumber is not None
        and frame.column is not None
    )


def first_bundle_url(stack: Sequence[StackFrame]) -> Optional[str]:
    return next((f.file for f in stack if is_http_url(f.file)), None)


def _remap(frame: StackFrame, source_map: SourceMap) -> StackFrame:
    pos = source_map.original_position_for(frame.lineNumber, frame.column)
    fields = {
        "methodName": frame.methodName,
        "file": pos.source,
        "lineNumber": pos.line,
        "column": pos.column,
    }
    if "arguments" in frame.model_fields_set:
        fields["arguments"] = frame.arguments
    return StackFrame(**fields)


def symbolicate(stack: Sequence[StackFrame], source_map_text: str) -> List[StackFrame]:
    """
    Rewrite every frame that points into a served bundle (http(s) file with
    line and column) to its original source position. Method names and
    arguments always come from the input frame. Other frames are returned as is.
    """
    try:
        source_map = SourceMap.loads(source_map_text)
    except SourceMapError as e:
        logger.warning("symbolicate.map.invalid err=%s", e)
        raise InvalidSymbolMapError.of(ErrorMessage.INVALID_SYMBOL_MAP, e)

    with source_map, timed(logger, "symbolicate.map", frames=len(stack)):
        return [_remap(f, source_map) if is_mappable(f) else f for f in stack]
