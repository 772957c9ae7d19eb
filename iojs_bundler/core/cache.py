"""Per-version download cache directories."""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from iojs_bundler.core.errors import FilesystemError
from iojs_bundler.core.memo import TaskMemo

logger = structlog.get_logger()


class ArtifactCache:
    """On-disk cache of release files, one directory per version.

    Cache layout:
    ~/.cache/iojs-bundler/
    └── {version}/                         # Resolved version without 'v'
        ├── SHASUMS256.txt                 # Checksum manifest
        ├── iojs-v{version}-{platform}-{arch}.tar.gz
        └── iojs-v{version}.tar.xz

    Directory creation is create-if-missing and memoized, so concurrent
    requests for the same directory collapse onto one mkdir. Nothing guards
    the tree against other processes sharing it.
    """

    def __init__(self, base_dir: Path | None = None):
        """Initialize artifact cache.

        Args:
            base_dir: Root cache directory, defaults to ~/.cache/iojs-bundler
        """
        self.base_dir = base_dir or (Path.home() / ".cache" / "iojs-bundler")
        self._dirs: TaskMemo[Path] = TaskMemo("cache_dirs")

    @property
    def mkdir_count(self) -> int:
        """Number of directory creations started by this cache."""
        return self._dirs.started

    def version_dir(self, version: str) -> Path:
        """Get the directory path for a version without creating it."""
        if not version or "/" in version or "\\" in version or version in (".", ".."):
            raise ValueError(f"Invalid version for cache path: {version!r}")
        return self.base_dir / version

    def path_for(self, version: str, file_name: str) -> Path:
        """Get the cache path of a file belonging to a version."""
        return self.version_dir(version) / file_name

    async def root(self) -> Path:
        """Ensure the root cache directory exists (memoized).

        Raises:
            FilesystemError: If the directory cannot be created
        """
        return await self._dirs.get(self.base_dir, lambda: self._ensure_dir(self.base_dir))

    async def directory_for(self, version: str) -> Path:
        """Ensure the cache directory for ``version`` exists (memoized).

        Raises:
            FilesystemError: If the directory cannot be created
        """
        path = self.version_dir(version)
        return await self._dirs.get(path, lambda: self._create_version_dir(path))

    async def _create_version_dir(self, path: Path) -> Path:
        await self.root()
        return await self._ensure_dir(path)

    async def _ensure_dir(self, path: Path) -> Path:
        try:
            await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            logger.error("cache_dir_failed", path=str(path), error=str(e))
            raise FilesystemError(f"Cannot create cache directory: {e}", path=path) from e

        logger.debug("cache_dir_ready", path=str(path))
        return path
