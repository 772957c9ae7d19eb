"""Shared utilities for iojs-bundler."""

from __future__ import annotations


def normalize_version(version: str) -> str:
    """Strip surrounding whitespace and a single leading 'v' prefix.

    Args:
        version: Version string as published in the release index

    Returns:
        Bare version string

    Example:
        >>> normalize_version("v1.6.2")
        '1.6.2'
        >>> normalize_version("1.6.2")
        '1.6.2'
    """
    version = version.strip()
    if version[:1] in ("v", "V"):
        return version[1:]
    return version
