"""Tests for iojs_bundler.core.http module."""

import asyncio
from unittest.mock import patch

import httpx
import pytest

from iojs_bundler.core.config import DistConfig
from iojs_bundler.core.errors import FilesystemError, NetworkError
from iojs_bundler.core.http import create_async_client, download_to_path, user_agent


class TestUserAgent:
    """Test outbound client identification."""

    def test_user_agent(self):
        assert user_agent("1.2.3") == "iojs-bundler (1.2.3)"

    def test_client_sends_user_agent(self):
        """Test every request carries the configured version."""
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers["user-agent"])
            return httpx.Response(200, content=b"ok")

        async def _run() -> None:
            client = create_async_client(
                DistConfig(), "4.5.6", transport=httpx.MockTransport(handler)
            )
            async with client:
                await client.get("https://iojs.org/dist/index.json")
                await client.get("https://iojs.org/dist/v1.0.0/SHASUMS256.txt")

        asyncio.run(_run())
        assert seen == ["iojs-bundler (4.5.6)", "iojs-bundler (4.5.6)"]

    def test_client_settings(self):
        """Test timeout and redirect settings come from configuration."""
        async def _run() -> None:
            async with create_async_client(DistConfig(timeout=5.0), "0.1.0") as client:
                assert client.timeout.read == 5.0
                assert client.follow_redirects is True

        asyncio.run(_run())


class TestDownloadToPath:
    """Test download_to_path function."""

    def test_download(self, tmp_path):
        """Test the body is streamed to disk."""
        body = b"x" * 200_000

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=body)

        async def _run() -> int:
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                return await download_to_path(client, "https://example.com/f", tmp_path / "f")

        assert asyncio.run(_run()) == len(body)
        assert (tmp_path / "f").read_bytes() == body

    def test_overwrites_existing(self, tmp_path):
        """Test the destination is truncated."""
        (tmp_path / "f").write_bytes(b"old contents that are longer")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"new")

        async def _run() -> None:
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                await download_to_path(client, "https://example.com/f", tmp_path / "f")

        asyncio.run(_run())
        assert (tmp_path / "f").read_bytes() == b"new"

    def test_non_200(self, tmp_path):
        """Test non-200 responses raise NetworkError without creating a file."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        async def _run() -> None:
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                await download_to_path(client, "https://example.com/f", tmp_path / "f")

        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(_run())

        assert exc_info.value.status_code == 503
        assert exc_info.value.url == "https://example.com/f"
        assert not (tmp_path / "f").exists()

    def test_transport_error(self, tmp_path):
        """Test transport failures raise NetworkError."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async def _run() -> None:
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                await download_to_path(client, "https://example.com/f", tmp_path / "f")

        with pytest.raises(NetworkError, match="timed out"):
            asyncio.run(_run())

    def test_unwritable_destination(self, tmp_path):
        """Test write failures raise FilesystemError."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"data")

        async def _run() -> None:
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                await download_to_path(client, "https://example.com/f", tmp_path / "missing" / "f")

        with pytest.raises(FilesystemError) as exc_info:
            asyncio.run(_run())

        assert exc_info.value.path == tmp_path / "missing" / "f"

    def test_file_io_off_event_loop(self, tmp_path):
        """Test opening, writing and closing the file run in worker threads."""
        real_to_thread = asyncio.to_thread
        offloaded: list[str] = []

        async def recording_to_thread(func, /, *args, **kwargs):
            offloaded.append(getattr(func, "__name__", repr(func)))
            return await real_to_thread(func, *args, **kwargs)

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"abc" * 100)

        async def _run() -> None:
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                with patch("iojs_bundler.core.http.asyncio.to_thread", new=recording_to_thread):
                    await download_to_path(client, "https://example.com/f", tmp_path / "f", chunk_size=100)

        asyncio.run(_run())

        assert offloaded[0] == "open"
        assert offloaded[-1] == "close"
        assert "write" in offloaded
        assert (tmp_path / "f").read_bytes() == b"abc" * 100

    def test_mid_stream_failure_leaves_partial_file(self, tmp_path):
        """Test a body that fails part way leaves what was written."""
        class BrokenStream(httpx.AsyncByteStream):
            async def __aiter__(self):
                yield b"partial"
                raise httpx.ReadError("connection reset")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, stream=BrokenStream())

        async def _run() -> None:
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                await download_to_path(client, "https://example.com/f", tmp_path / "f")

        with pytest.raises(NetworkError, match="connection reset"):
            asyncio.run(_run())

        assert (tmp_path / "f").read_bytes() == b"partial"
