"""Core type definitions for iojs_bundler."""

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class ArtifactKind(StrEnum):
    """Kinds of per-version files kept in the cache."""
    INSTALLER = "installer"
    SOURCE = "source"


class Release(BaseModel):
    """Single entry of the release index."""
    version: str = Field(..., description="Release version, usually with a leading 'v'")
    date: str | None = Field(None, description="Release date")
    files: list[str] = Field(default_factory=list, description="Published file identifiers")
    npm: str | None = Field(None, description="Bundled npm version")
    v8: str | None = Field(None, description="Bundled V8 version")

    model_config = ConfigDict(extra="allow")


class CachedArtifact(BaseModel):
    """A local file whose digest matched its manifest entry."""
    kind: ArtifactKind = Field(..., description="Artifact kind")
    file_name: str = Field(..., description="File name as listed in the manifest")
    path: Path = Field(..., description="Verified path inside the version cache directory")
    expected_digest: str = Field(..., description="Manifest SHA-256 digest (lowercase hex)")
    downloaded: bool = Field(
        default=False,
        description="True when this session fetched the file, False on cache hit"
    )

    model_config = ConfigDict(frozen=True)


class InstallationResult(BaseModel):
    """Outcome handed to the installation step."""
    version: str = Field(..., description="Resolved version without prefix")
    target_path: Path = Field(..., description="Requested install location")
    installer: CachedArtifact = Field(..., description="Verified platform installer archive")
    source: CachedArtifact = Field(..., description="Verified source archive")

    model_config = ConfigDict(frozen=True)

    @property
    def artifact_paths(self) -> list[Path]:
        """Verified artifact paths, installer first."""
        return [self.installer.path, self.source.path]
