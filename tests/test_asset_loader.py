"""
Tests for asset fetch/read/decode and the registry's image operations
"""

import httpx
import pytest

from animbind.models.config import AssetConfig
from animbind.models.errors import AssetLoadError
from animbind.services.asset_loader import AssetLoader, is_url
from animbind.services.instance_registry import InstanceRegistry

from tests.fakes import AsyncFakeDecoder, FakeDecoder, FakeImage, FakeImageSlot, build_view_model

PNG = b"\x89PNG fake"


def handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/missing.png":
        return httpx.Response(404)
    if request.url.path == "/big.png":
        return httpx.Response(200, content=b"x" * 64)
    if request.url.path == "/empty.png":
        return httpx.Response(200, content=b"")
    return httpx.Response(200, content=PNG)


@pytest.fixture
def loader():
    return AssetLoader(AssetConfig(max_bytes=32), decoder=FakeDecoder(),
                       transport=httpx.MockTransport(handler))


@pytest.fixture
def asset_registry(loader):
    registry = InstanceRegistry(asset_loader=loader)
    registry.load("hero", build_view_model(), image_handle=FakeImageSlot())
    return registry


def test_is_url():
    assert is_url("https://example.com/a.png")
    assert is_url("HTTP://example.com/a.png")
    assert not is_url("/tmp/a.png")
    assert not is_url(b"https://")


class TestFetch:
    @pytest.mark.asyncio
    async def test_ok(self, loader):
        assert await loader.fetch("https://cdn.test/a.png") == PNG
        assert loader.fetch_count == 1

    @pytest.mark.asyncio
    async def test_http_error(self, loader):
        with pytest.raises(AssetLoadError) as info:
            await loader.fetch("https://cdn.test/missing.png")
        assert "404" in info.value.message

    @pytest.mark.asyncio
    async def test_size_limit(self, loader):
        with pytest.raises(AssetLoadError):
            await loader.fetch("https://cdn.test/big.png")

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        loader = AssetLoader(transport=httpx.MockTransport(refuse))
        with pytest.raises(AssetLoadError):
            await loader.fetch("https://cdn.test/a.png")

    @pytest.mark.asyncio
    async def test_malformed_url(self, loader):
        with pytest.raises(AssetLoadError):
            await loader.fetch("http://[::1")


class TestResolveAndDecode:
    @pytest.mark.asyncio
    async def test_local_file(self, loader, tmp_path):
        path = tmp_path / "cover.png"
        path.write_bytes(PNG)
        assert await loader.resolve(str(path)) == PNG

    @pytest.mark.asyncio
    async def test_missing_file(self, loader, tmp_path):
        with pytest.raises(AssetLoadError):
            await loader.resolve(str(tmp_path / "nope.png"))

    @pytest.mark.asyncio
    async def test_path_with_nul_byte(self, loader):
        with pytest.raises(AssetLoadError):
            await loader.read_local_file("bad\x00path")

    @pytest.mark.asyncio
    async def test_bytes_pass_through(self, loader):
        assert await loader.resolve(bytearray(b"abc")) == b"abc"

    @pytest.mark.asyncio
    async def test_async_decoder(self):
        loader = AssetLoader(decoder=AsyncFakeDecoder())
        image = await loader.load(b"abc")
        assert isinstance(image, FakeImage)

    @pytest.mark.asyncio
    async def test_nothing_decoded(self, loader):
        with pytest.raises(AssetLoadError):
            await loader.decode(b"")

    @pytest.mark.asyncio
    async def test_no_decoder(self):
        with pytest.raises(AssetLoadError):
            await AssetLoader().decode(b"abc")


class TestRegistryImages:
    @pytest.mark.asyncio
    async def test_property_from_url(self, asset_registry):
        ok = await asset_registry.update_property_async("hero", "cover", "https://cdn.test/a.png")
        assert ok is True
        assert asset_registry.get_property_value("hero", "cover").data == PNG

    @pytest.mark.asyncio
    async def test_nested_async_for_plain_values(self, asset_registry):
        assert await asset_registry.update_nested_property_async("hero", "settings/theme", "light")
        assert asset_registry.get_property_value("hero", "settings.theme") == "light"

    @pytest.mark.asyncio
    async def test_property_fetch_failure(self, asset_registry):
        ok = await asset_registry.update_property_async("hero", "cover", "https://cdn.test/missing.png")
        assert ok is False
        assert asset_registry.get_property_value("hero", "cover") is None

    @pytest.mark.asyncio
    async def test_slot_from_url(self, asset_registry):
        assert await asset_registry.update_image_from_url("hero", "https://cdn.test/a.png")
        assert asset_registry.get_instance("hero").image_handle.decoded == [PNG]

    @pytest.mark.asyncio
    async def test_slot_from_bytes_and_file(self, asset_registry, tmp_path):
        path = tmp_path / "b.png"
        path.write_bytes(b"file")
        assert await asset_registry.update_image_from_bytes("hero", b"raw")
        assert await asset_registry.update_image_from_file("hero", str(path))
        assert asset_registry.get_instance("hero").image_handle.decoded == [b"raw", b"file"]

    @pytest.mark.asyncio
    async def test_slot_rejects_empty(self, asset_registry):
        assert await asset_registry.update_image_from_url("hero", "https://cdn.test/empty.png") is False

    @pytest.mark.asyncio
    async def test_slot_with_unusable_sources(self, asset_registry):
        assert await asset_registry.update_image_from_url("hero", "http://[::1") is False
        assert await asset_registry.update_image_from_file("hero", "bad\x00path") is False
        assert asset_registry.get_instance("hero").image_handle.decoded == []

    @pytest.mark.asyncio
    async def test_slot_decode_crash_is_contained(self, asset_registry, monkeypatch):
        async def explode(*args, **kwargs):
            raise KeyError("corrupt")

        monkeypatch.setattr(asset_registry.asset_loader, "decode_into", explode)
        assert await asset_registry.update_image_from_bytes("hero", b"raw") is False

    @pytest.mark.asyncio
    async def test_no_slot(self, loader):
        registry = InstanceRegistry(asset_loader=loader)
        registry.load("plain", build_view_model())
        assert await registry.update_image_from_bytes("plain", b"raw") is False

    @pytest.mark.asyncio
    async def test_preload_and_swap(self, asset_registry):
        count = await asset_registry.preload_images("hero", [
            "https://cdn.test/a.png",
            "https://cdn.test/missing.png",
            "https://cdn.test/c.png",
        ])
        assert count == 2

        stats = asset_registry.get_cache_stats()
        assert stats["image_assets"] == 1
        assert stats["cached_image_sets"] == 1
        assert stats["total_cached_images"] == 2

        assert asset_registry.update_image_from_cache("hero", 1) is True
        assert asset_registry.update_image_from_cache("hero", 2) is False
        slot = asset_registry.get_instance("hero").image_handle
        assert len(slot.rendered) == 1

    @pytest.mark.asyncio
    async def test_preload_skips_malformed_and_crashing_sources(self, asset_registry, monkeypatch):
        assert await asset_registry.preload_images("hero", ["http://[::1", "https://cdn.test/a.png"]) == 1

        async def explode(value, decoder=None):
            raise KeyError("corrupt")

        monkeypatch.setattr(asset_registry.asset_loader, "load", explode)
        assert await asset_registry.preload_images("hero", ["https://cdn.test/a.png"]) == 0

    @pytest.mark.asyncio
    async def test_deregister_releases_preloaded_images(self, asset_registry):
        await asset_registry.preload_images("hero", ["https://cdn.test/a.png"])
        instance = asset_registry.get_instance("hero")
        asset_registry.deregister("hero")
        assert instance.image_cache == []
        assert asset_registry.get_cache_stats()["total_cached_images"] == 0

    def test_register_slots(self, asset_registry):
        assert asset_registry.register_font_asset("hero", FakeImageSlot()) is True
        assert asset_registry.register_image_asset("ghost", FakeImageSlot()) is False
        assert asset_registry.get_cache_stats()["font_assets"] == 1
