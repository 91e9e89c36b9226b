"""
Asset loader - fetches, reads and decodes image/font bytes

Values accepted for image and font properties:
- http(s) URL strings: fetched with httpx
- other strings: read as local file paths
- bytes / bytearray: used as is
Decoding is delegated to an injected decoder (sync or async).
"""

import asyncio
import inspect
from pathlib import Path
from typing import Any, Optional

import httpx

from animbind.engine.protocols import IAssetDecoder, IAssetSlot
from animbind.models.config import AssetConfig
from animbind.models.errors import AssetLoadError
from animbind.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.ASSET)


def is_url(value: Any) -> bool:
    return isinstance(value, str) and value.lower().startswith(("http://", "https://"))


def needs_loading(value: Any) -> bool:
    """True for values that must be turned into bytes before decoding"""
    return isinstance(value, (str, bytes, bytearray))


class AssetLoader:
    """
    Async asset I/O.

    Example:
        loader = AssetLoader(AssetConfig(), decoder=engine_decoder)
        image = await loader.load("https://example.com/cover.png")

    Args:
        config: Timeout and size limits
        decoder: Object with decode(bytes) -> asset (may return an awaitable)
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        config: Optional[AssetConfig] = None,
        decoder: Optional[IAssetDecoder] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.config = config or AssetConfig()
        self.decoder = decoder
        self._transport = transport
        self.fetch_count = 0

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.http_timeout,
            follow_redirects=self.config.follow_redirects,
            transport=self._transport,
        )

    async def fetch(self, url: str) -> bytes:
        """
        Download bytes from url.

        Raises:
            AssetLoadError: malformed URL, transport error, non-2xx status or
                oversized body
        """
        self.fetch_count += 1
        try:
            async with self._client() as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as ex:
            raise AssetLoadError(url, f"HTTP {ex.response.status_code}") from ex
        except httpx.HTTPError as ex:
            raise AssetLoadError(url, str(ex) or type(ex).__name__) from ex
        except httpx.InvalidURL as ex:
            raise AssetLoadError(url, f"invalid URL: {ex}") from ex

        data = response.content
        if len(data) > self.config.max_bytes:
            raise AssetLoadError(url, f"{len(data)} bytes exceeds limit of {self.config.max_bytes}")

        log.debug("Asset fetched", url=url, size=len(data))
        return data

    async def read_local_file(self, path: str) -> bytes:
        """
        Raises:
            AssetLoadError: file missing or unreadable, or path not representable
        """
        try:
            data = await asyncio.to_thread(Path(path).read_bytes)
        except OSError as ex:
            raise AssetLoadError(path, ex.strerror or str(ex)) from ex
        except ValueError as ex:
            # embedded NUL byte
            raise AssetLoadError(path, f"invalid path: {ex}") from ex

        log.debug("Asset read", path=path, size=len(data))
        return data

    async def resolve(self, value: Any) -> bytes:
        """Bytes for a URL, a local path or raw bytes"""
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if is_url(value):
            return await self.fetch(value)
        if isinstance(value, str):
            return await self.read_local_file(value)
        raise AssetLoadError(type(value).__name__, "unsupported asset source")

    async def decode(
        self,
        data: bytes,
        decoder: Optional[IAssetDecoder] = None,
        source: str = "bytes"
    ) -> Any:
        """
        Decode bytes with decoder (default: the configured one).

        Raises:
            AssetLoadError: no decoder, decoder failure or nothing decoded
        """
        decoder = decoder or self.decoder
        if decoder is None:
            raise AssetLoadError(source, "no decoder configured")

        try:
            decoded = decoder.decode(data)
            if inspect.isawaitable(decoded):
                decoded = await decoded
        except AssetLoadError:
            raise
        except Exception as ex:
            raise AssetLoadError(source, f"decode failed: {ex}") from ex

        if decoded is None:
            raise AssetLoadError(source, "decoder returned nothing")
        return decoded

    async def decode_into(self, slot: IAssetSlot, data: bytes, source: str = "bytes") -> None:
        """
        Decode bytes directly into an intercepted asset slot.

        Raises:
            AssetLoadError: slot decode raised or reported failure (False)
        """
        try:
            result = slot.decode(data)
            if inspect.isawaitable(result):
                result = await result
        except Exception as ex:
            raise AssetLoadError(source, f"decode failed: {ex}") from ex

        if result is False:
            raise AssetLoadError(source, "asset slot rejected the data")
        log.debug("Asset decoded into slot", source=source, size=len(data))

    async def load(self, value: Any, decoder: Optional[IAssetDecoder] = None) -> Any:
        """Resolve and decode in one step"""
        source = value if isinstance(value, str) else "bytes"
        data = await self.resolve(value)
        return await self.decode(data, decoder, source=source)
