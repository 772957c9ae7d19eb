"""CLI command implementations for iojs_bundler.

- resolve: Resolve a semver range against the release index
- fetch: Download and verify the matching release archives
- config: Show or save the effective configuration
"""

from iojs_bundler.commands.config import config_group
from iojs_bundler.commands.fetch import fetch, resolve

__all__ = ["config_group", "fetch", "resolve"]
