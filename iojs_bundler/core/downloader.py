"""Verified artifact downloads.

Ensures a release file exists in the version cache directory and that its
SHA-256 digest matches the release's checksum manifest. The network is only
used on a cache miss, but verification runs on every first request in a
session, cache hit or not, so corruption and leftovers from an interrupted
run are caught before anything is installed.
"""

from __future__ import annotations

import asyncio

import httpx
import structlog

from iojs_bundler.core.cache import ArtifactCache
from iojs_bundler.core.checksums import ChecksumStore
from iojs_bundler.core.errors import MissingChecksumError
from iojs_bundler.core.http import download_to_path
from iojs_bundler.core.integrity import verify_file_digest_async
from iojs_bundler.core.memo import TaskMemo
from iojs_bundler.core.types import ArtifactKind, CachedArtifact

logger = structlog.get_logger()


class VerifiedDownloader:
    """Fetches release files into the cache and verifies them."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: ArtifactCache,
        checksums: ChecksumStore,
    ):
        """Initialize downloader.

        Args:
            client: HTTP client used for artifact downloads
            cache: Cache providing per-version directories
            checksums: Store providing per-version manifests
        """
        self.client = client
        self.cache = cache
        self.checksums = checksums
        self._artifacts: TaskMemo[CachedArtifact] = TaskMemo("artifacts")

    async def ensure(
        self,
        url: str,
        file_name: str,
        version: str,
        kind: ArtifactKind = ArtifactKind.INSTALLER,
    ) -> CachedArtifact:
        """Ensure ``file_name`` is cached for ``version`` and verified.

        Repeated calls for the same file within a session return the first
        result without re-verifying.

        Args:
            url: Download URL used on a cache miss
            file_name: File name as listed in the manifest
            version: Resolved version
            kind: Artifact kind recorded in the result

        Returns:
            Verified cached artifact

        Raises:
            MissingChecksumError: If the manifest has no entry for the file
            NetworkError: If the download fails
            FilesystemError: If the file cannot be written or read
            ChecksumMismatchError: If the digest does not match
        """
        return await self._artifacts.get(
            (version, file_name),
            lambda: self._ensure(url, file_name, version, kind),
        )

    async def _ensure(
        self,
        url: str,
        file_name: str,
        version: str,
        kind: ArtifactKind,
    ) -> CachedArtifact:
        cache_dir, manifest = await asyncio.gather(
            self.cache.directory_for(version),
            self.checksums.manifest_for(version),
        )

        expected = manifest.get(file_name)
        if expected is None:
            logger.error("checksum_missing", file=file_name, version=version)
            raise MissingChecksumError(file_name, version)

        path = cache_dir / file_name
        downloaded = False
        if await asyncio.to_thread(path.exists):
            logger.debug("cache_hit", file=file_name, version=version)
        else:
            logger.info("artifact_download", url=url, file=file_name)
            size = await download_to_path(self.client, url, path)
            downloaded = True
            logger.info("artifact_downloaded", file=file_name, bytes=size)

        await verify_file_digest_async(path, expected)
        logger.info("artifact_verified", file=file_name, version=version, downloaded=downloaded)

        return CachedArtifact(
            kind=kind,
            file_name=file_name,
            path=path,
            expected_digest=expected,
            downloaded=downloaded,
        )
