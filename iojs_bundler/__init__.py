"""iojs-bundler - fetch verified io.js release archives.

Resolves a semver range against the io.js release index, downloads the
matching platform installer and source archives, verifies them against
the published SHA-256 manifest and keeps everything in a per-version
disk cache.

Key modules:
- core: Resolution, caching, download and verification
- commands: CLI command implementations
"""

__version__ = "0.1.0"
__author__ = "iojs-bundler contributors"

# Re-export commonly used types
from iojs_bundler.core.types import (  # noqa: E402
    ArtifactKind,
    CachedArtifact,
    InstallationResult,
)

__all__ = [
    "__version__",
    "__author__",
    "ArtifactKind",
    "CachedArtifact",
    "InstallationResult",
]
