# Path: jdk_provisioner/engine/release_catalog.py
"""
Release Catalog

Async client for the remote release registry (Eclipse Adoptium API v3).
Answers which Java major versions are offered and which checksums are
published for a version.

Architecture:
- One GET per query, no local caching (freshness over round trips)
- Transport failures -> CatalogUnreachable
- Unexpected response shapes -> CatalogMalformed
- Never retries; the orchestration layer owns retries
"""

import asyncio
import json
import string
from typing import Any, Optional

import aiohttp

from jdk_provisioner.core.config_loader import ConfigLoader
from jdk_provisioner.core.errors import (
    CatalogUnreachable,
    CatalogMalformed,
    VersionNotOffered,
)
from jdk_provisioner.core.logger import get_logger
from jdk_provisioner.engine.result import BinaryDescriptor, ReleaseInfo, validate_java_version
from jdk_provisioner.constants import (
    CHECKSUM_ALGORITHM,
    CHECKSUM_HEX_LENGTHS,
    DEFAULT_API_BASE_URL,
    DEFAULT_CATALOG_TIMEOUT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_USER_AGENT,
    DEFAULT_OS,
    DEFAULT_ARCH,
    DEFAULT_IMAGE_TYPE,
    HTTP_OK,
    LOG_INPUT,
    LOG_PROCESS,
    LOG_OUTPUT,
)
from jdk_provisioner.engine.constants import (
    AVAILABLE_RELEASES_PATH,
    ASSETS_PATH_TEMPLATE,
    BINARY_PATH_TEMPLATE,
    KEY_AVAILABLE_RELEASES,
    KEY_MOST_RECENT_LTS,
    KEY_BINARIES,
    KEY_BINARY,
    KEY_PACKAGE,
    KEY_CHECKSUM,
    KEY_LINK,
    KEY_OS,
    KEY_ARCHITECTURE,
    KEY_IMAGE_TYPE,
    HEADER_USER_AGENT,
    HEADER_ACCEPT,
    ACCEPT_JSON,
)

logger = get_logger(__name__, 'engine')

_HEX_DIGITS = frozenset(string.hexdigits)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def is_valid_checksum(checksum: Any, algorithm: str = CHECKSUM_ALGORITHM) -> bool:
    """True if checksum is a hex digest of the length the algorithm produces."""
    expected_length = CHECKSUM_HEX_LENGTHS.get(algorithm)
    return (
        isinstance(checksum, str)
        and expected_length is not None
        and len(checksum) == expected_length
        and all(char in _HEX_DIGITS for char in checksum)
    )


def parse_available_releases(payload: Any) -> frozenset[int]:
    """
    Parse the available-releases document.

    Accepts a bare JSON array of integers or an object carrying an
    ``available_releases`` array.

    Raises:
        CatalogMalformed: On any other shape
    """
    releases = payload
    if isinstance(payload, dict):
        releases = payload.get(KEY_AVAILABLE_RELEASES)

    if not isinstance(releases, list):
        raise CatalogMalformed("Expected a JSON array of available releases")

    if not all(_is_positive_int(item) for item in releases):
        raise CatalogMalformed("Available releases must be positive integers")

    return frozenset(releases)


def parse_release_assets(version: int, payload: Any) -> ReleaseInfo:
    """
    Parse the assets document for one version.

    Expected shape: a JSON array of release objects, each with a
    ``binaries`` array of objects carrying ``package.checksum``. A release
    carrying a single ``binary`` object is read as a one-element array.

    Raises:
        CatalogMalformed: On any other shape, an invalid checksum, or when
            no checksum is published at all
    """
    if not isinstance(payload, list):
        raise CatalogMalformed("Expected JSON array in assets response", version=version)

    descriptors = []
    for release in payload:
        if not isinstance(release, dict):
            raise CatalogMalformed("Release entry is not an object", version=version)

        binaries = release.get(KEY_BINARIES)
        if binaries is None and isinstance(release.get(KEY_BINARY), dict):
            binaries = [release[KEY_BINARY]]
        if not isinstance(binaries, list):
            raise CatalogMalformed("Release entry has no binaries array", version=version)

        for binary in binaries:
            package = binary.get(KEY_PACKAGE) if isinstance(binary, dict) else None
            if not isinstance(package, dict):
                raise CatalogMalformed("Binary entry has no package object", version=version)

            checksum = package.get(KEY_CHECKSUM)
            if not is_valid_checksum(checksum):
                raise CatalogMalformed(
                    f"Invalid {CHECKSUM_ALGORITHM} checksum: {checksum!r}",
                    version=version
                )

            descriptors.append(BinaryDescriptor(
                platform=(
                    str(binary.get(KEY_OS, '')),
                    str(binary.get(KEY_ARCHITECTURE, '')),
                    str(binary.get(KEY_IMAGE_TYPE, '')),
                ),
                url=str(package.get(KEY_LINK, '')),
                checksum=checksum.lower(),
            ))

    if not descriptors:
        raise CatalogMalformed("No checksums published", version=version)

    return ReleaseInfo(version=version, binaries=tuple(descriptors))


class ReleaseCatalog:
    """
    Client for the release registry.

    Example:
        async with ReleaseCatalog() as catalog:
            if 21 in await catalog.available_versions():
                checksums = await catalog.checksums_for(21)
    """

    def __init__(
        self,
        config: Optional[ConfigLoader] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize release catalog.

        Args:
            config: Optional ConfigLoader instance
            session: Optional shared aiohttp session (not closed by close())
        """
        self.config = config if config else ConfigLoader()

        self.base_url = self.config.get('api_base_url', DEFAULT_API_BASE_URL).rstrip('/')
        self.timeout = self.config.get('catalog_timeout', DEFAULT_CATALOG_TIMEOUT)
        self.connect_timeout = self.config.get('connect_timeout', DEFAULT_CONNECT_TIMEOUT)
        self.user_agent = self.config.get('user_agent', DEFAULT_USER_AGENT)
        self.platform_os = self.config.get('platform_os', DEFAULT_OS)
        self.platform_arch = self.config.get('platform_arch', DEFAULT_ARCH)
        self.image_type = self.config.get('image_type', DEFAULT_IMAGE_TYPE)

        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    HEADER_USER_AGENT: self.user_agent,
                    HEADER_ACCEPT: ACCEPT_JSON,
                }
            )
            self._owns_session = True
        return self._session

    async def _get_json(self, url: str) -> Any:
        """
        GET a JSON document.

        Raises:
            CatalogUnreachable: Transport error, timeout or non-200 status
            CatalogMalformed: Body is not valid JSON
        """
        logger.debug(f"{LOG_INPUT} GET {url}")

        session = await self._get_session()
        timeout = aiohttp.ClientTimeout(total=self.timeout, connect=self.connect_timeout)

        try:
            async with session.get(url, timeout=timeout) as response:
                logger.debug(f"{LOG_PROCESS} Response: {response.status}")
                if response.status != HTTP_OK:
                    raise CatalogUnreachable(f"Registry answered HTTP {response.status} for {url}")
                body = await response.read()
        except asyncio.TimeoutError as e:
            raise CatalogUnreachable(f"Registry timed out after {self.timeout}s: {url}") from e
        except aiohttp.ClientError as e:
            raise CatalogUnreachable(f"Registry request failed: {e}") from e

        try:
            return json.loads(body)
        except (ValueError, UnicodeDecodeError) as e:
            raise CatalogMalformed(f"Failed to parse JSON response from {url}: {e}") from e

    async def available_versions(self) -> frozenset[int]:
        """
        Query the set of offered Java major versions.

        Returns:
            Frozen set of versions

        Raises:
            CatalogUnreachable, CatalogMalformed
        """
        logger.info(f"{LOG_INPUT} Querying available releases")
        payload = await self._get_json(f"{self.base_url}{AVAILABLE_RELEASES_PATH}")
        versions = parse_available_releases(payload)
        logger.info(f"{LOG_OUTPUT} Available releases: {sorted(versions)}")
        return versions

    async def most_recent_lts(self) -> int:
        """
        Query the most recent long-term-support release.

        Raises:
            CatalogUnreachable, CatalogMalformed
        """
        payload = await self._get_json(f"{self.base_url}{AVAILABLE_RELEASES_PATH}")
        lts = payload.get(KEY_MOST_RECENT_LTS) if isinstance(payload, dict) else None
        if not _is_positive_int(lts):
            raise CatalogMalformed("Registry does not publish a most recent LTS release")
        return lts

    async def release_info(self, version: int) -> ReleaseInfo:
        """
        Published binaries for a version.

        Raises:
            VersionNotOffered: If the version is not in available_versions()
            CatalogUnreachable, CatalogMalformed
        """
        version = validate_java_version(version)
        if version not in await self.available_versions():
            raise VersionNotOffered(
                f"Java {version} is not offered by the registry",
                version=version
            )
        return await self._fetch_assets(version)

    async def checksums_for(self, version: int) -> frozenset[str]:
        """
        Published checksums for a version.

        Returns:
            Non-empty set of lowercase hex digests

        Raises:
            CatalogUnreachable, CatalogMalformed
        """
        version = validate_java_version(version)
        info = await self._fetch_assets(version)
        return info.checksums

    async def _fetch_assets(self, version: int) -> ReleaseInfo:
        logger.info(f"{LOG_INPUT} Querying release assets for Java {version}")
        url = f"{self.base_url}{ASSETS_PATH_TEMPLATE.format(version=version)}"
        try:
            payload = await self._get_json(url)
            info = parse_release_assets(version, payload)
        except (CatalogUnreachable, CatalogMalformed) as e:
            e.version = version
            raise
        logger.info(f"{LOG_OUTPUT} {len(info.binaries)} binaries published for Java {version}")
        return info

    def binary_url(self, version: int) -> str:
        """Download URL of the latest GA archive for the configured platform."""
        path = BINARY_PATH_TEMPLATE.format(
            version=validate_java_version(version),
            os=self.platform_os,
            arch=self.platform_arch,
            image_type=self.image_type,
        )
        return f"{self.base_url}{path}"

    async def close(self):
        """Close the HTTP session if this catalog created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


__all__ = [
    'ReleaseCatalog',
    'parse_available_releases',
    'parse_release_assets',
    'is_valid_checksum',
]
