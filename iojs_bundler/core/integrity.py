"""Content integrity verification for cached release files.

Every artifact is checked against the SHA-256 digest published in the
release's checksum manifest. Hashing reads the file from disk in chunks, so
a freshly downloaded file and one left over from an earlier run are
verified the same way.
"""

from __future__ import annotations

import asyncio
import functools
import hashlib
from pathlib import Path

import structlog

from iojs_bundler.core.errors import ChecksumMismatchError, FilesystemError

logger = structlog.get_logger()

DIGEST_ALGORITHM = "sha256"
HASH_CHUNK_SIZE = 1 << 16


def compute_file_digest(path: Path, algorithm: str = DIGEST_ALGORITHM) -> str:
    """Compute the hex digest of a file.

    Args:
        path: File to hash
        algorithm: hashlib algorithm name

    Returns:
        Lowercase hex digest

    Raises:
        FilesystemError: If the file cannot be read
    """
    digest = hashlib.new(algorithm)
    try:
        with open(path, "rb") as f:
            for chunk in iter(functools.partial(f.read, HASH_CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError as e:
        raise FilesystemError(f"Cannot read file for verification: {e}", path=path) from e
    return digest.hexdigest()


def verify_file_digest(path: Path, expected: str) -> Path:
    """Verify a file against its expected digest.

    Comparison is case-insensitive on the hex encoding.

    Args:
        path: File to verify
        expected: Expected hex digest

    Returns:
        The verified path

    Raises:
        ChecksumMismatchError: If the digests differ
        FilesystemError: If the file cannot be read
    """
    actual = compute_file_digest(path)
    expected_lower = expected.strip().lower()
    if actual != expected_lower:
        logger.error(
            "checksum_mismatch", path=str(path), expected=expected_lower, actual=actual
        )
        raise ChecksumMismatchError(path, expected=expected_lower, actual=actual)
    return path


async def verify_file_digest_async(path: Path, expected: str) -> Path:
    """Run :func:`verify_file_digest` in a worker thread."""
    return await asyncio.to_thread(verify_file_digest, path, expected)
