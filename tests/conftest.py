"""Pytest configuration and shared fixtures for iojs_bundler tests."""

from __future__ import annotations

import asyncio
import hashlib
import json
from pathlib import Path

import httpx
import pytest

from iojs_bundler.core.config import AppConfig, CacheConfig, DistConfig, PlatformConfig
from iojs_bundler.core.http import create_async_client

BASE_URL = "https://dist.test/dist"


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class FakeDist:
    """In-memory distribution server served through httpx.MockTransport.

    Records every requested path so tests can assert how many network
    operations actually happened.
    """

    def __init__(self, versions: list[str] | None = None):
        self.releases: list[dict] = [
            {"version": f"v{v}", "date": "2015-06-01", "files": ["linux-x64", "src"]}
            for v in (versions or [])
        ]
        self.files: dict[str, bytes] = {}
        self.content_type: str | None = "application/json"
        self.index_body: bytes | None = None
        self.index_status = 200
        self.delay = 0.0
        self.requests: list[str] = []
        self.user_agents: list[str | None] = []

    def set_versions(self, versions: list[str], prefix: str = "v") -> None:
        self.releases = [{"version": f"{prefix}{v}"} for v in versions]

    def count(self, path: str) -> int:
        return self.requests.count(path)

    def count_suffix(self, suffix: str) -> int:
        return sum(1 for p in self.requests if p.endswith(suffix))

    def publish(
        self,
        version: str,
        platform: str = "linux",
        arch: str = "x64",
        installer: bytes = b"installer archive bytes",
        source: bytes = b"source archive bytes",
        extra_manifest: str = "",
    ) -> dict[str, str]:
        """Publish installer, source and checksum manifest for a version.

        Returns:
            Mapping of file name to digest written into the manifest
        """
        installer_name = f"iojs-v{version}-{platform}-{arch}.tar.gz"
        source_name = f"iojs-v{version}.tar.xz"
        digests = {installer_name: sha256_hex(installer), source_name: sha256_hex(source)}

        self.files[f"/dist/v{version}/{installer_name}"] = installer
        self.files[f"/dist/v{version}/{source_name}"] = source
        manifest = "".join(f"{digest}  {name}\n" for name, digest in digests.items())
        self.files[f"/dist/v{version}/SHASUMS256.txt"] = (manifest + extra_manifest).encode()
        return digests

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request.url.path)
        self.user_agents.append(request.headers.get("user-agent"))
        if self.delay:
            await asyncio.sleep(self.delay)

        if request.url.path == "/dist/index.json":
            headers = {"content-type": self.content_type} if self.content_type else {}
            body = self.index_body if self.index_body is not None else json.dumps(self.releases).encode()
            return httpx.Response(self.index_status, headers=headers, content=body)

        body = self.files.get(request.url.path)
        if body is None:
            return httpx.Response(404, content=b"not found")
        return httpx.Response(200, content=body)

    def client(self, config: DistConfig | None = None, client_version: str = "0.1.0") -> httpx.AsyncClient:
        return create_async_client(
            config or DistConfig(base_url=BASE_URL),
            client_version,
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def fake_dist() -> FakeDist:
    """Distribution server with a handful of io.js releases."""
    return FakeDist(["1.0.0", "1.2.0", "1.6.2", "2.0.0", "3.3.1"])


@pytest.fixture
def dist_config() -> DistConfig:
    return DistConfig(base_url=BASE_URL)


@pytest.fixture
def app_config(tmp_path: Path, dist_config: DistConfig) -> AppConfig:
    """Configuration targeting linux-x64 with a temporary cache."""
    return AppConfig(
        platform=PlatformConfig(platform="linux", arch="x64"),
        dist=dist_config,
        cache=CacheConfig(cache_dir=tmp_path / "cache"),
    )


# Pytest configuration
def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest settings."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
