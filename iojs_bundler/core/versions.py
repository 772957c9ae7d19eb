"""Release index retrieval and version selector resolution."""

from __future__ import annotations

import json
from collections.abc import Iterable

import httpx
import structlog
from pydantic import ValidationError
from semantic_version import NpmSpec, Version

from iojs_bundler.core.errors import (
    FormatError,
    InvalidSelectorError,
    NetworkError,
    NoSatisfyingVersionError,
)
from iojs_bundler.core.memo import TaskMemo
from iojs_bundler.core.naming import NamingPolicy
from iojs_bundler.core.types import Release
from iojs_bundler.core.utils import normalize_version

logger = structlog.get_logger()

JSON_CONTENT_TYPE = "application/json"


def parse_selector(selector: str) -> NpmSpec:
    """Parse an npm-style semver range.

    Args:
        selector: Range such as "^1.2.0", "1.x" or ">=1.0.0 <2.0.0"

    Returns:
        Parsed range

    Raises:
        InvalidSelectorError: If the range cannot be parsed
    """
    if not isinstance(selector, str) or not selector.strip():
        raise InvalidSelectorError(str(selector), "empty selector")
    try:
        return NpmSpec(selector.strip())
    except ValueError as e:
        raise InvalidSelectorError(selector, str(e)) from e


def select_version(versions: Iterable[str], spec: NpmSpec) -> str | None:
    """Return the highest version in ``versions`` that satisfies ``spec``.

    Entries are normalized by stripping a leading 'v'; entries that are not
    valid semantic versions are ignored.
    """
    candidates = []
    for raw in versions:
        try:
            candidates.append(Version(normalize_version(raw)))
        except ValueError:
            logger.debug("release_version_skipped", version=raw)

    best = spec.select(candidates)
    return str(best) if best is not None else None


class VersionResolver:
    """Resolves a selector against the remote release index.

    The index is fetched at most once and the resolved version is memoized
    for the lifetime of the resolver; concurrent callers share the same
    in-flight request.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        naming: NamingPolicy,
        selector: str | NpmSpec,
    ):
        """Initialize resolver.

        Args:
            client: HTTP client used for the index request
            naming: Naming policy providing the index URL
            selector: Version range, parsed eagerly

        Raises:
            InvalidSelectorError: If the selector cannot be parsed
        """
        self.client = client
        self.naming = naming
        if isinstance(selector, NpmSpec):
            self.spec = selector
            self.selector = selector.expression
        else:
            self.spec = parse_selector(selector)
            self.selector = selector
        self._index: TaskMemo[list[Release]] = TaskMemo("release_index")
        self._resolved: TaskMemo[str] = TaskMemo("resolved_version")

    async def fetch_index(self) -> list[Release]:
        """Fetch the release index (memoized).

        Raises:
            NetworkError: On transport failure or non-200 status
            FormatError: On unexpected content type or malformed JSON
        """
        return await self._index.get(self.naming.index_url(), self._fetch_index)

    async def resolve(self) -> str:
        """Resolve the selector to a concrete version (memoized).

        Raises:
            NoSatisfyingVersionError: If no release satisfies the selector
        """
        return await self._resolved.get(self.selector, self._resolve)

    async def _resolve(self) -> str:
        releases = await self.fetch_index()
        version = select_version((r.version for r in releases), self.spec)
        if version is None:
            logger.error(
                "version_unsatisfied", selector=self.selector, releases=len(releases)
            )
            raise NoSatisfyingVersionError(self.selector, len(releases))

        logger.info("version_resolved", selector=self.selector, version=version)
        return version

    async def _fetch_index(self) -> list[Release]:
        url = self.naming.index_url()
        try:
            response = await self.client.get(url)
        except httpx.HTTPError as e:
            logger.error("index_fetch_failed", url=url, error=str(e))
            raise NetworkError(f"Request failed: {e}", url=url) from e

        if response.status_code != 200:
            logger.error("index_fetch_failed", url=url, status=response.status_code)
            raise NetworkError(
                f"Unexpected status code: {response.status_code}",
                url=url,
                status_code=response.status_code,
            )

        content_type = response.headers.get("content-type", "")
        media_type = content_type.split(";")[0].strip().lower()
        if media_type != JSON_CONTENT_TYPE:
            raise FormatError(f"Unexpected Content-Type: {content_type or '<none>'}", url=url)

        try:
            payload = json.loads(response.text)
        except json.JSONDecodeError as e:
            raise FormatError(f"Invalid JSON: {e}", url=url) from e

        if not isinstance(payload, list):
            raise FormatError(
                f"Expected a JSON array, got {type(payload).__name__}", url=url
            )

        try:
            releases = [Release.model_validate(entry) for entry in payload]
        except ValidationError as e:
            raise FormatError(f"Malformed release entry: {e}", url=url) from e

        logger.debug("index_fetched", url=url, releases=len(releases))
        return releases
