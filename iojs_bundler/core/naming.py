"""Artifact file names and download URLs for a release."""

from __future__ import annotations

from iojs_bundler.core.config import DistConfig


class NamingPolicy:
    """Derives file names and URLs from a resolved version.

    Layout of the distribution tree::

        {base_url}/index.json
        {base_url}/v{version}/SHASUMS256.txt
        {base_url}/v{version}/{product}-v{version}-{platform}-{arch}.tar.gz
        {base_url}/v{version}/{product}-v{version}.tar.xz

    All methods are pure; versions are passed without the 'v' prefix.
    """

    def __init__(self, config: DistConfig | None = None):
        self.config = config or DistConfig()

    @property
    def base_url(self) -> str:
        return self.config.base_url

    def index_url(self) -> str:
        """URL of the JSON release index."""
        return f"{self.base_url}/index.json"

    def version_url(self, version: str) -> str:
        """Directory URL holding a release's files."""
        return f"{self.base_url}/v{version}"

    def checksums_file_name(self) -> str:
        return self.config.checksums_file

    def checksums_url(self, version: str) -> str:
        """URL of a release's checksum manifest."""
        return f"{self.version_url(version)}/{self.checksums_file_name()}"

    def installer_file_name(self, version: str, platform: str, arch: str) -> str:
        """File name of the prebuilt archive for a platform.

        Example:
            >>> NamingPolicy().installer_file_name("1.6.2", "linux", "x64")
            'iojs-v1.6.2-linux-x64.tar.gz'
        """
        return f"{self.config.product}-v{version}-{platform}-{arch}.tar.gz"

    def installer_url(self, version: str, file_name: str) -> str:
        return f"{self.version_url(version)}/{file_name}"

    def src_file_name(self, version: str) -> str:
        """File name of the source archive.

        Example:
            >>> NamingPolicy().src_file_name("1.6.2")
            'iojs-v1.6.2.tar.xz'
        """
        return f"{self.config.product}-v{version}.tar.xz"

    def src_url(self, version: str, file_name: str) -> str:
        return f"{self.version_url(version)}/{file_name}"
