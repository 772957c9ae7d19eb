"""Error types raised while resolving, fetching and verifying releases.

Every failure in the install graph surfaces as a subclass of
:class:`BundlerError` so callers can catch a single type and still tell
which stage failed from the concrete class and its attributes.
"""

from __future__ import annotations

from pathlib import Path


class BundlerError(Exception):
    """Base class for all iojs-bundler failures."""

    stage = "bundler"


class InvalidSelectorError(BundlerError, ValueError):
    """Raised when a version selector is not a valid semver range."""

    stage = "selector"

    def __init__(self, selector: str, reason: str | None = None):
        self.selector = selector
        message = f"Invalid version selector: {selector!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class NetworkError(BundlerError):
    """Raised on transport failures or unexpected HTTP responses.

    Attributes:
        url: URL that was being fetched
        status_code: HTTP status code, if a response was received
    """

    stage = "network"

    def __init__(self, message: str, *, url: str, status_code: int | None = None):
        self.url = url
        self.status_code = status_code
        super().__init__(f"{url}: {message}")


class FormatError(BundlerError):
    """Raised when a remote document cannot be interpreted."""

    stage = "format"

    def __init__(self, message: str, *, url: str):
        self.url = url
        super().__init__(f"{url}: {message}")


class NoSatisfyingVersionError(BundlerError):
    """Raised when no release in the index satisfies the selector."""

    stage = "resolve"

    def __init__(self, selector: str, available: int = 0):
        self.selector = selector
        self.available = available
        super().__init__(
            f"No version satisfies semver range: {selector} "
            f"({available} releases considered)"
        )


class FilesystemError(BundlerError):
    """Raised when a cache directory or file cannot be created or read."""

    stage = "filesystem"

    def __init__(self, message: str, *, path: Path | str):
        self.path = Path(path)
        super().__init__(f"{path}: {message}")


class MissingChecksumError(BundlerError):
    """Raised when an artifact has no entry in the checksum manifest."""

    stage = "checksum"

    def __init__(self, file_name: str, version: str):
        self.file_name = file_name
        self.version = version
        super().__init__(
            f"Could not find {file_name} in the checksum manifest for v{version}"
        )


class ChecksumMismatchError(BundlerError):
    """Raised when a file's digest differs from the manifest entry.

    Attributes:
        expected: Expected digest as lowercase hex
        actual: Computed digest as lowercase hex
        path: File that was verified
    """

    stage = "verify"

    def __init__(self, path: Path | str, *, expected: str, actual: str):
        self.path = Path(path)
        self.expected = expected
        self.actual = actual
        super().__init__(f"{path}: expected sha256 {expected} but got {actual}")
