import json

import pytest

from config.store_context import StoreContext
from conftest import APP_MAP, APP_MAP_LINE, source_map_json
from core.symbolication import extract_bundle_reference, symbolicate
from model.api import StackFrame
from service.bundle_service import BundleService
from service.symbolication_service import SymbolicationService
from util.enums import Platform
from util.errors import (
    InvalidSymbolMapError,
    MalformedReferenceError,
    MissingBundleReferenceError,
    NotFoundError,
)

MAP = source_map_json("AAAA;AACA,IAAI")


def test_extract_bundle_reference() -> None:
    ref = extract_bundle_reference(
        "http://10.0.2.2:3000/bundles/acme/android/latest/index.bundle?platform=android"
    )

    assert (ref.store_id, ref.platform, ref.bundle_id) == ("acme", Platform.ANDROID, "latest")


@pytest.mark.parametrize(
    "url",
    [
        "http://host/index.bundle",
        "http://host/bundles/acme/android/",
        "http://host/bundles/acme/windows/123/index.bundle",
    ],
)
def test_extract_bundle_reference_rejects_other_urls(url) -> None:
    with pytest.raises(MalformedReferenceError):
        extract_bundle_reference(url)


def test_symbolicate_maps_only_bundle_frames() -> None:
    frames = [
        StackFrame(methodName="onPress", file="http://h/x.bundle", lineNumber=2, column=7, arguments=[1]),
        StackFrame(methodName="native", file="[native code]", lineNumber=2, column=7),
        StackFrame(methodName="noColumn", file="http://h/x.bundle", lineNumber=2),
        StackFrame(methodName="anon"),
    ]

    out = symbolicate(frames, MAP)

    assert len(out) == len(frames)
    mapped = out[0]
    assert (mapped.file, mapped.lineNumber, mapped.column) == ("App.js", 2, 4)
    assert mapped.methodName == "onPress"
    assert mapped.arguments == [1]
    assert out[1:] == frames[1:]


def test_symbolicate_keeps_method_name_over_map_name() -> None:
    text = source_map_json("AAAAA", names=["renderedName"])
    frame = StackFrame(methodName="onPress", file="https://h/b.bundle", lineNumber=1, column=0)

    (out,) = symbolicate([frame], text)

    assert out.methodName == "onPress"
    assert out.file == "App.js"


def test_symbolicate_unmapped_position_yields_nulls() -> None:
    frame = StackFrame(methodName="f", file="http://h/b.bundle", lineNumber=50, column=0)

    (out,) = symbolicate([frame], MAP)

    assert (out.file, out.lineNumber, out.column) == (None, None, None)
    assert out.methodName == "f"


def test_symbolicate_rejects_corrupt_map() -> None:
    with pytest.raises(InvalidSymbolMapError):
        symbolicate([StackFrame(methodName="f")], "{broken")


async def _store_with_bundle(ctx: StoreContext, source_map: str) -> BundleService:
    await ctx.metadata.create_store("acme")
    service = BundleService(ctx.metadata, ctx.bundles, ctx.sourcemaps)
    await service.ingest_bundle("acme", Platform.ANDROID, b"js", source_map.encode())
    return service


@pytest.mark.asyncio
async def test_request_flow_resolves_latest_bundle(ctx: StoreContext) -> None:
    bundles = await _store_with_bundle(ctx, json.dumps(APP_MAP))
    body = json.dumps(
        {
            "stack": [
                {"methodName": "native", "file": "[native code]"},
                {
                    "methodName": "onPress",
                    "file": "http://h/bundles/acme/android/latest/index.bundle",
                    "lineNumber": APP_MAP_LINE,
                    "column": 24,
                },
            ]
        }
    )

    envelope = await SymbolicationService(bundles).symbolicate_request(body)

    result = json.loads(envelope.dump())["stack"]
    assert result[0] == {"methodName": "native", "file": "[native code]"}
    assert result[1] == {
        "methodName": "onPress",
        "file": "src/App.js",
        "lineNumber": 10,
        "column": 4,
    }


@pytest.mark.asyncio
async def test_request_flow_errors(ctx: StoreContext) -> None:
    bundles = await _store_with_bundle(ctx, MAP)
    service = SymbolicationService(bundles)

    with pytest.raises(MissingBundleReferenceError):
        await service.symbolicate_request(json.dumps({"stack": [{"methodName": "f"}]}))
    with pytest.raises(MalformedReferenceError):
        await service.symbolicate_request("not json")
    with pytest.raises(NotFoundError):
        await service.symbolicate_request(
            json.dumps({"stack": [{"file": "http://h/bundles/ghost/ios/latest/x"}]})
        )


@pytest.mark.asyncio
async def test_request_flow_missing_source_map_blob(ctx: StoreContext) -> None:
    bundles = await _store_with_bundle(ctx, MAP)
    bundle = ctx.metadata.get_latest_bundle("acme", Platform.ANDROID)
    (ctx.sourcemaps.root / bundle.sourceMap).unlink()

    with pytest.raises(NotFoundError):
        await SymbolicationService(bundles).symbolicate_request(
            json.dumps({"stack": [{"file": f"http://h/bundles/acme/android/{bundle.id}/x"}]})
        )
