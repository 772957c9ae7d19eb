"""Checksum manifest retrieval, caching and parsing."""

from __future__ import annotations

import asyncio
import re
from pathlib import Path

import httpx
import structlog

from iojs_bundler.core.cache import ArtifactCache
from iojs_bundler.core.errors import FilesystemError
from iojs_bundler.core.http import download_to_path
from iojs_bundler.core.memo import TaskMemo
from iojs_bundler.core.naming import NamingPolicy

logger = structlog.get_logger()

# "<hex digest><whitespace>[*]<file name>", the sha256sum output format
MANIFEST_LINE = re.compile(r"^([0-9A-Fa-f]+)\s+\*?(\S.*?)\s*$")


def parse_manifest(text: str) -> dict[str, str]:
    """Parse a checksum manifest into a file name to digest mapping.

    Lines that do not match the digest/file name pattern are skipped.
    When a file name appears more than once the last line wins. Digests
    are stored lowercase.

    Example:
        >>> parse_manifest("abcd1234  file.tar.gz\\n")
        {'file.tar.gz': 'abcd1234'}
    """
    entries: dict[str, str] = {}
    skipped = 0
    for line in text.splitlines():
        match = MANIFEST_LINE.match(line)
        if match is None:
            if line.strip():
                skipped += 1
            continue
        digest, file_name = match.groups()
        entries[file_name] = digest.lower()

    if skipped:
        logger.debug("manifest_lines_skipped", count=skipped)
    return entries


def load_manifest(path: Path) -> dict[str, str]:
    """Read and parse a manifest file.

    Raises:
        FilesystemError: If the file cannot be read
    """
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise FilesystemError(f"Cannot read checksum manifest: {e}", path=path) from e
    return parse_manifest(text)


class ChecksumStore:
    """Per-version checksum manifests, cached on disk and in memory."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        naming: NamingPolicy,
        cache: ArtifactCache,
    ):
        self.client = client
        self.naming = naming
        self.cache = cache
        self._manifests: TaskMemo[dict[str, str]] = TaskMemo("manifests")

    async def manifest_for(self, version: str) -> dict[str, str]:
        """Get the checksum manifest for a version (memoized).

        Uses the cached manifest file when present, otherwise downloads it
        into the version's cache directory first.

        Raises:
            NetworkError: If the manifest download fails
            FilesystemError: If the manifest cannot be written or read
        """
        return await self._manifests.get(version, lambda: self._load(version))

    async def _load(self, version: str) -> dict[str, str]:
        cache_dir = await self.cache.directory_for(version)
        path = cache_dir / self.naming.checksums_file_name()

        if await asyncio.to_thread(path.exists):
            logger.debug("cache_hit", file=path.name, version=version)
        else:
            url = self.naming.checksums_url(version)
            logger.info("manifest_download", url=url, version=version)
            await download_to_path(self.client, url, path)

        manifest = await asyncio.to_thread(load_manifest, path)
        logger.debug("manifest_loaded", version=version, entries=len(manifest))
        return manifest
