"""Core functionality for iojs_bundler.

This module provides the pieces of the install pipeline:
- Configuration management
- Type definitions and errors
- Version resolution against the release index
- Per-version disk cache, checksum manifests and verified downloads
- The install session tying them together
"""

from iojs_bundler.core.errors import (
    BundlerError,
    ChecksumMismatchError,
    FilesystemError,
    FormatError,
    InvalidSelectorError,
    MissingChecksumError,
    NetworkError,
    NoSatisfyingVersionError,
)
from iojs_bundler.core.types import (
    ArtifactKind,
    CachedArtifact,
    InstallationResult,
    Release,
)

__all__ = [
    # Errors
    "BundlerError",
    "InvalidSelectorError",
    "NetworkError",
    "FormatError",
    "NoSatisfyingVersionError",
    "FilesystemError",
    "MissingChecksumError",
    "ChecksumMismatchError",
    # Types
    "ArtifactKind",
    "CachedArtifact",
    "InstallationResult",
    "Release",
]
