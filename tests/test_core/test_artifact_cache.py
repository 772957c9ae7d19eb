"""Tests for iojs_bundler.core.cache module."""

import asyncio
from unittest.mock import patch

import pytest

from iojs_bundler.core.cache import ArtifactCache
from iojs_bundler.core.errors import FilesystemError


class TestArtifactCache:
    """Test ArtifactCache class."""

    def test_init_default_base_dir(self, tmp_path):
        """Test initialization with default base directory."""
        with patch("pathlib.Path.home", return_value=tmp_path):
            cache = ArtifactCache()
            assert cache.base_dir == tmp_path / ".cache" / "iojs-bundler"

    def test_init_does_not_touch_disk(self, tmp_path):
        """Test directories are only created on demand."""
        cache = ArtifactCache(base_dir=tmp_path / "cache")
        assert not cache.base_dir.exists()
        assert cache.mkdir_count == 0

    def test_paths(self, tmp_path):
        """Test path helpers."""
        cache = ArtifactCache(base_dir=tmp_path)
        assert cache.version_dir("1.6.2") == tmp_path / "1.6.2"
        assert cache.path_for("1.6.2", "SHASUMS256.txt") == tmp_path / "1.6.2" / "SHASUMS256.txt"

    @pytest.mark.parametrize("version", ["", "..", ".", "1.0/..", "a\\b"])
    def test_invalid_version_paths(self, tmp_path, version):
        """Test versions that would escape the cache are rejected."""
        cache = ArtifactCache(base_dir=tmp_path)
        with pytest.raises(ValueError):
            cache.version_dir(version)

    def test_root_created(self, tmp_path):
        """Test the root directory is created."""
        cache = ArtifactCache(base_dir=tmp_path / "a" / "b")

        path = asyncio.run(cache.root())

        assert path == tmp_path / "a" / "b"
        assert path.is_dir()

    def test_directory_for_creates_root_and_version(self, tmp_path):
        """Test per-version directories are created under the root."""
        cache = ArtifactCache(base_dir=tmp_path / "cache")

        path = asyncio.run(cache.directory_for("1.6.2"))

        assert path == tmp_path / "cache" / "1.6.2"
        assert path.is_dir()

    def test_existing_directory_is_fine(self, tmp_path):
        """Test creation is idempotent when the directory already exists."""
        (tmp_path / "cache" / "1.6.2").mkdir(parents=True)
        cache = ArtifactCache(base_dir=tmp_path / "cache")

        path = asyncio.run(cache.directory_for("1.6.2"))

        assert path.is_dir()

    def test_concurrent_requests_single_mkdir(self, tmp_path):
        """Test concurrent requests collapse onto one creation per directory."""
        cache = ArtifactCache(base_dir=tmp_path / "cache")

        async def _run() -> list:
            return await asyncio.gather(
                *(cache.directory_for("1.6.2") for _ in range(10)),
                *(cache.root() for _ in range(5)),
            )

        results = asyncio.run(_run())

        assert set(results[:10]) == {tmp_path / "cache" / "1.6.2"}
        assert set(results[10:]) == {tmp_path / "cache"}
        # One for the root, one for the version
        assert cache.mkdir_count == 2

    def test_separate_versions(self, tmp_path):
        """Test each version gets its own directory."""
        cache = ArtifactCache(base_dir=tmp_path)

        async def _run() -> list:
            return await asyncio.gather(cache.directory_for("1.0.0"), cache.directory_for("2.0.0"))

        a, b = asyncio.run(_run())

        assert a != b
        assert a.is_dir() and b.is_dir()
        assert cache.mkdir_count == 3

    def test_creation_failure(self, tmp_path):
        """Test failures other than 'already exists' raise FilesystemError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        cache = ArtifactCache(base_dir=blocker / "cache")

        with pytest.raises(FilesystemError) as exc_info:
            asyncio.run(cache.directory_for("1.6.2"))

        assert exc_info.value.path == blocker / "cache"

    def test_root_is_a_file(self, tmp_path):
        """Test a file in place of the root raises FilesystemError."""
        root = tmp_path / "cache"
        root.write_text("oops")
        cache = ArtifactCache(base_dir=root)

        with pytest.raises(FilesystemError):
            asyncio.run(cache.root())
