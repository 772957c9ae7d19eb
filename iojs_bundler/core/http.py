"""HTTP client construction and streaming downloads."""

from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
import structlog

from iojs_bundler.core.config import DistConfig
from iojs_bundler.core.errors import FilesystemError, NetworkError

logger = structlog.get_logger()


def user_agent(client_version: str) -> str:
    """Build the identifying client string sent with every request."""
    return f"iojs-bundler ({client_version})"


def create_async_client(
    config: DistConfig,
    client_version: str,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an async HTTP client tagged with the tool's version.

    Args:
        config: Distribution server configuration
        client_version: Version embedded in the User-Agent header
        transport: Optional transport override

    Returns:
        Configured async client; the caller owns it and must close it
    """
    return httpx.AsyncClient(
        headers={"User-Agent": user_agent(client_version)},
        timeout=config.timeout,
        verify=config.verify_ssl,
        follow_redirects=True,
        transport=transport,
    )


async def download_to_path(
    client: httpx.AsyncClient,
    url: str,
    path: Path,
    chunk_size: int = 65536,
) -> int:
    """Stream a remote file to ``path``.

    File operations run in worker threads so the event loop never blocks
    on disk I/O. A failure part way through leaves the partial file in place.

    Args:
        client: HTTP client
        url: URL to fetch
        path: Destination file, truncated if it exists
        chunk_size: Read size for the response body

    Returns:
        Number of bytes written

    Raises:
        NetworkError: On transport errors or a non-200 response
        FilesystemError: If the destination cannot be written
    """
    written = 0
    try:
        async with client.stream("GET", url) as response:
            if response.status_code != 200:
                raise NetworkError(
                    f"Unexpected status code: {response.status_code}",
                    url=url,
                    status_code=response.status_code,
                )
            try:
                f = await asyncio.to_thread(open, path, "wb")
                try:
                    async for chunk in response.aiter_bytes(chunk_size):
                        await asyncio.to_thread(f.write, chunk)
                        written += len(chunk)
                finally:
                    await asyncio.to_thread(f.close)
            except OSError as e:
                logger.error("download_write_failed", url=url, path=str(path), error=str(e))
                raise FilesystemError(f"Write failed: {e}", path=path) from e
    except httpx.HTTPError as e:
        logger.error("download_failed", url=url, path=str(path), written=written, error=str(e))
        raise NetworkError(f"Request failed: {e}", url=url) from e

    logger.debug("download_complete", url=url, path=str(path), size=written)
    return written
