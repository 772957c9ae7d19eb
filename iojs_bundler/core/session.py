"""Top-level install session wiring the resolve/download/verify graph."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import httpx
import structlog

from iojs_bundler import __version__
from iojs_bundler.core.cache import ArtifactCache
from iojs_bundler.core.checksums import ChecksumStore
from iojs_bundler.core.config import AppConfig
from iojs_bundler.core.downloader import VerifiedDownloader
from iojs_bundler.core.http import create_async_client
from iojs_bundler.core.naming import NamingPolicy
from iojs_bundler.core.types import ArtifactKind, CachedArtifact, InstallationResult
from iojs_bundler.core.versions import VersionResolver, parse_selector

logger = structlog.get_logger()

InstallationStep = Callable[[InstallationResult], Awaitable[Any] | Any]


class InstallSession:
    """Resolves a version range and fetches verified release artifacts.

    The selector is validated on construction. Everything else happens
    lazily in :meth:`install`: the resolved version, cache directories,
    checksum manifest and each artifact are computed at most once per
    session and shared by every step that needs them. The installer and
    source archives are fetched concurrently once their shared inputs are
    ready.

    Args:
        target_path: Where the installation step should install to
        selector: npm-style semver range
        config: Application configuration, defaults to ``AppConfig()``
        client_version: Version reported in the User-Agent header
        client: HTTP client to use; the session creates and owns one if None
        installation_step: Optional callable (sync or async) receiving the
            result after all artifacts are verified
    """

    def __init__(
        self,
        target_path: Path | str,
        selector: str,
        config: AppConfig | None = None,
        *,
        client_version: str = __version__,
        client: httpx.AsyncClient | None = None,
        installation_step: InstallationStep | None = None,
    ):
        self.target_path = Path(target_path)
        self.spec = parse_selector(selector)
        self.selector = selector
        self.config = config or AppConfig()
        self.platform = self.config.platform
        self.installation_step = installation_step

        self._owns_client = client is None
        self.client = client or create_async_client(self.config.dist, client_version)

        self.naming = NamingPolicy(self.config.dist)
        self.cache = ArtifactCache(self.config.cache.cache_dir)
        self.resolver = VersionResolver(self.client, self.naming, self.spec)
        self.checksums = ChecksumStore(self.client, self.naming, self.cache)
        self.downloader = VerifiedDownloader(self.client, self.cache, self.checksums)

    async def resolve_version(self) -> str:
        """Resolve the selector to a concrete version."""
        return await self.resolver.resolve()

    async def installer_file(self) -> CachedArtifact:
        """Fetch and verify the platform installer archive."""
        version = await self.resolver.resolve()
        file_name = self.naming.installer_file_name(
            version, self.platform.platform, self.platform.arch
        )
        return await self.downloader.ensure(
            self.naming.installer_url(version, file_name),
            file_name,
            version,
            ArtifactKind.INSTALLER,
        )

    async def source_file(self) -> CachedArtifact:
        """Fetch and verify the source archive."""
        version = await self.resolver.resolve()
        file_name = self.naming.src_file_name(version)
        return await self.downloader.ensure(
            self.naming.src_url(version, file_name),
            file_name,
            version,
            ArtifactKind.SOURCE,
        )

    async def install(self, deadline: float | None = None) -> InstallationResult:
        """Run the graph and hand the verified artifacts to the installation step.

        The first failure anywhere in the graph is raised unchanged; work
        that is still running on other branches is left to finish on its own.
        If the deadline expires, shared work keeps running and later calls on
        this session reuse it.

        Args:
            deadline: Optional overall time limit in seconds

        Returns:
            Resolved version and verified artifact paths

        Raises:
            BundlerError: Subclass describing the first failing stage
            TimeoutError: If ``deadline`` expires first
        """
        if deadline is None:
            return await self._install()
        return await asyncio.wait_for(self._install(), timeout=deadline)

    async def _install(self) -> InstallationResult:
        logger.info(
            "install_started",
            selector=self.selector,
            platform=self.platform.platform,
            arch=self.platform.arch,
        )
        version, installer, source = await asyncio.gather(
            self.resolver.resolve(),
            self.installer_file(),
            self.source_file(),
        )
        result = InstallationResult(
            version=version,
            target_path=self.target_path,
            installer=installer,
            source=source,
        )

        if self.installation_step is not None:
            outcome = self.installation_step(result)
            if inspect.isawaitable(outcome):
                await outcome

        logger.info("install_ready", version=version, target=str(self.target_path))
        return result

    async def aclose(self) -> None:
        """Close the HTTP client if this session created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> InstallSession:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
