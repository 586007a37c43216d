"""Tests for bundle ingestion, retention and store lifecycle."""

import logging

import pytest

from config.store_context import StoreContext
from service.bundle_service import BundleService
from service.store_service import StoreService
from util.enums import Platform
from util.errors import ForbiddenError, NotFoundError, StorageError, UnauthorizedError


def _bundles(ctx: StoreContext, max_bundles: int = -1) -> BundleService:
    return BundleService(ctx.metadata, ctx.bundles, ctx.sourcemaps, max_bundles=max_bundles)


def _stores(ctx: StoreContext) -> StoreService:
    return StoreService(ctx.metadata, ctx.bundles, ctx.sourcemaps)


@pytest.mark.asyncio
async def test_ingest_writes_blobs_then_record(ctx: StoreContext) -> None:
    await _stores(ctx).create_store("acme")

    bundle = await _bundles(ctx).ingest_bundle("acme", Platform.ANDROID, b"js", b"{}")

    assert (ctx.bundles.root / bundle.id).read_bytes() == b"js"
    assert (ctx.sourcemaps.root / bundle.sourceMap).read_bytes() == b"{}"
    assert bundle.id != bundle.sourceMap
    assert bundle.timestamp > 0
    assert ctx.metadata.list_bundles("acme") == [bundle]


@pytest.mark.asyncio
async def test_ingest_into_missing_store_writes_nothing(ctx: StoreContext) -> None:
    with pytest.raises(NotFoundError):
        await _bundles(ctx).ingest_bundle("ghost", Platform.IOS, b"js", b"{}")

    assert list(ctx.bundles.root.iterdir()) == []
    assert list(ctx.sourcemaps.root.iterdir()) == []


@pytest.mark.asyncio
@pytest.mark.parametrize("max_bundles", [1, 2, 3])
async def test_retention_keeps_most_recent(ctx: StoreContext, max_bundles: int) -> None:
    await _stores(ctx).create_store("acme")
    service = _bundles(ctx, max_bundles)

    ingested = []
    for i in range(max_bundles + 3):
        platform = Platform.ANDROID if i % 2 else Platform.IOS
        ingested.append(await service.ingest_bundle("acme", platform, b"%d" % i, b"{}"))

    kept = ctx.metadata.list_bundles("acme")
    assert [b.id for b in kept] == [b.id for b in ingested[-max_bundles:]]
    for evicted in ingested[:-max_bundles]:
        assert not (ctx.bundles.root / evicted.id).exists()
        assert not (ctx.sourcemaps.root / evicted.sourceMap).exists()
    assert len(list(ctx.bundles.root.iterdir())) == max_bundles


@pytest.mark.asyncio
async def test_eviction_is_store_wide_not_per_platform(ctx: StoreContext) -> None:
    await _stores(ctx).create_store("acme")
    service = _bundles(ctx, max_bundles=2)

    ios = await service.ingest_bundle("acme", Platform.IOS, b"i", b"{}")
    a1 = await service.ingest_bundle("acme", Platform.ANDROID, b"a1", b"{}")
    a2 = await service.ingest_bundle("acme", Platform.ANDROID, b"a2", b"{}")

    assert [b.id for b in ctx.metadata.list_bundles("acme")] == [a1.id, a2.id]
    with pytest.raises(NotFoundError):
        service.resolve_bundle("acme", "latest", Platform.IOS)
    with pytest.raises(NotFoundError):
        service.resolve_bundle("acme", ios.id, Platform.IOS)


@pytest.mark.asyncio
async def test_unlimited_retention_keeps_everything(ctx: StoreContext) -> None:
    await _stores(ctx).create_store("acme")
    service = _bundles(ctx, max_bundles=-1)

    for _ in range(5):
        await service.ingest_bundle("acme", Platform.ANDROID, b"js", b"{}")

    assert len(ctx.metadata.list_bundles("acme")) == 5


@pytest.mark.asyncio
async def test_eviction_survives_missing_blobs(ctx: StoreContext, caplog) -> None:
    await _stores(ctx).create_store("acme")
    service = _bundles(ctx, max_bundles=1)
    first = await service.ingest_bundle("acme", Platform.ANDROID, b"1", b"{}")
    (ctx.bundles.root / first.id).unlink()
    (ctx.bundles.root / first.id).mkdir()  # unlink() on a directory fails with OSError

    caplog.set_level(logging.WARNING)
    second = await service.ingest_bundle("acme", Platform.ANDROID, b"2", b"{}")

    assert [b.id for b in ctx.metadata.list_bundles("acme")] == [second.id]
    assert any("bundle.evict.blob.error" in r.getMessage() for r in caplog.records)
    assert not (ctx.sourcemaps.root / first.sourceMap).exists()


@pytest.mark.asyncio
async def test_resolve_latest_and_literal(ctx: StoreContext) -> None:
    await _stores(ctx).create_store("acme")
    service = _bundles(ctx)
    a1 = await service.ingest_bundle("acme", Platform.ANDROID, b"a1", b"{}")
    a2 = await service.ingest_bundle("acme", Platform.ANDROID, b"a2", b"{}")
    await service.ingest_bundle("acme", Platform.IOS, b"i1", b"{}")

    assert service.resolve_bundle("acme", "latest", Platform.ANDROID).id == a2.id
    assert service.resolve_bundle("acme", a1.id, Platform.ANDROID).id == a1.id
    assert b"".join(service.open_bundle(a1)) == b"a1"
    with pytest.raises(NotFoundError):
        service.resolve_bundle("acme", "nope", Platform.ANDROID)


@pytest.mark.asyncio
async def test_delete_store_removes_blobs_then_record(ctx: StoreContext) -> None:
    stores = _stores(ctx)
    store = await stores.create_store("acme")
    service = _bundles(ctx)
    bundles = [
        await service.ingest_bundle("acme", p, b"js", b"{}")
        for p in (Platform.ANDROID, Platform.IOS)
    ]

    removed = await stores.delete_store("acme", store.accessKey)

    assert removed.id == "acme"
    assert not ctx.metadata.has_store("acme")
    for bundle in bundles:
        assert not (ctx.bundles.root / bundle.id).exists()
        assert not (ctx.sourcemaps.root / bundle.sourceMap).exists()
    # The id is free again once deleted.
    assert (await stores.create_store("acme")).accessKey != store.accessKey


@pytest.mark.asyncio
async def test_delete_store_checks_access_key(ctx: StoreContext) -> None:
    stores = _stores(ctx)
    await stores.create_store("acme")

    with pytest.raises(UnauthorizedError) as missing:
        await stores.delete_store("acme", None)
    with pytest.raises(ForbiddenError) as wrong:
        await stores.delete_store("acme", "wrong")
    with pytest.raises(NotFoundError):
        await stores.delete_store("ghost", "whatever")

    assert missing.value.status_code == 400
    assert wrong.value.status_code == 403
    assert ctx.metadata.has_store("acme")


@pytest.mark.asyncio
async def test_delete_store_attempts_every_blob_before_failing(ctx: StoreContext) -> None:
    stores = _stores(ctx)
    store = await stores.create_store("acme")
    bundle = await _bundles(ctx).ingest_bundle("acme", Platform.ANDROID, b"js", b"{}")
    (ctx.bundles.root / bundle.id).unlink()
    (ctx.bundles.root / bundle.id).mkdir()

    with pytest.raises(StorageError) as exc:
        await stores.delete_store("acme", store.accessKey)

    assert exc.value.status_code == 500
    assert not (ctx.sourcemaps.root / bundle.sourceMap).exists()
    assert ctx.metadata.has_store("acme")


@pytest.mark.asyncio
async def test_non_ascii_access_key_is_forbidden(ctx: StoreContext) -> None:
    stores = _stores(ctx)
    await stores.create_store("acme")

    with pytest.raises(ForbiddenError):
        await stores.delete_store("acme", "café")
    with pytest.raises(NotFoundError):
        stores.get_store_by_access_key("café")
