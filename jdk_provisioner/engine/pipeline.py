# Path: jdk_provisioner/engine/pipeline.py
"""
Provisioning Pipeline

Main workflow orchestrator for JDK acquisition.
Coordinates: cache lookup → catalog check → download → verify → commit →
optional extraction.

Architecture:
- Explicit state machine (PipelineState), recorded on the result
- Components injected, so tests swap in fakes for network and subprocess
- Same-version exclusivity: asyncio.Lock in-process, FileLock across
  processes, cache re-checked once both are held
- Staged bytes are discarded on every failure path, cancellation included
- Cache reflects reality: only a verified artifact is ever committed
"""

import asyncio
import time
from pathlib import Path
from typing import Optional, Union

from filelock import Timeout as FileLockTimeout

from jdk_provisioner.core.config_loader import ConfigLoader
from jdk_provisioner.core.errors import (
    ChecksumMismatch,
    LockTimeout,
    ProvisioningError,
    VersionNotOffered,
)
from jdk_provisioner.core.logger import get_logger
from jdk_provisioner.engine.cache_store import CacheStore
from jdk_provisioner.engine.release_catalog import ReleaseCatalog
from jdk_provisioner.engine.protocol_handlers import HTTPHandler
from jdk_provisioner.engine.stream_handler import ProgressCallback
from jdk_provisioner.engine.verifier import Verifier
from jdk_provisioner.engine.extraction import Extractor
from jdk_provisioner.engine.result import (
    PipelineState,
    ProvisioningResult,
    validate_java_version,
)
from jdk_provisioner.constants import (
    DEFAULT_STAGING_MAX_AGE_HOURS,
    LOG_INPUT,
    LOG_PROCESS,
    LOG_OUTPUT,
)

logger = get_logger(__name__, 'engine')


def _tag(error: ProvisioningError, stage: PipelineState, version: int) -> ProvisioningError:
    """Attach the failing stage and version unless a component already did."""
    if error.stage is None:
        error.stage = stage
    if error.version is None:
        error.version = version
    return error


class ProvisioningPipeline:
    """
    Ensures a verified JDK archive is present in the cache.

    Workflow for ensure(version):
    1. Cache hit → done (no network)
    2. Query available versions; absent → VersionNotOffered
    3. Acquire per-version locks, re-check the cache
    4. Download to a staging file
    5. Verify against published checksums
    6. Commit (rename) into place
    7. Optionally extract into an existing directory

    CRITICAL: Nothing appears under a final cache name unless verified.

    Example:
        async with ProvisioningPipeline(CacheStore('~/.cache')) as pipeline:
            result = await pipeline.ensure(21)
            print(result.entry.path)
    """

    def __init__(
        self,
        cache_store: Optional[CacheStore] = None,
        catalog: Optional[ReleaseCatalog] = None,
        downloader: Optional[HTTPHandler] = None,
        verifier: Optional[Verifier] = None,
        extractor: Optional[Extractor] = None,
        config: Optional[ConfigLoader] = None
    ):
        """
        Initialize provisioning pipeline.

        Args:
            cache_store: Cache of committed artifacts (configured root if None)
            catalog: Release registry client
            downloader: Artifact fetcher with an async fetch(url, destination,
                progress_callback) method
            verifier: Checksum verifier
            extractor: Archive extractor
            config: Optional ConfigLoader instance
        """
        self.config = config if config else ConfigLoader()

        self.store = cache_store if cache_store else CacheStore(config=self.config)
        self.catalog = catalog if catalog else ReleaseCatalog(self.config)
        self.downloader = downloader if downloader else HTTPHandler(self.config)
        self.verifier = verifier if verifier else Verifier()
        self.extractor = extractor if extractor else Extractor()

        # Only close what this pipeline created
        self._owned = [
            component for component, given in (
                (self.catalog, catalog),
                (self.downloader, downloader),
            ) if given is None
        ]

        self.create_cache_root = self.config.get('create_cache_root', True)
        self.staging_max_age = 3600 * self.config.get(
            'staging_max_age_hours', DEFAULT_STAGING_MAX_AGE_HOURS
        )

        self._version_locks: dict[int, asyncio.Lock] = {}
        self._locks_loop: Optional[asyncio.AbstractEventLoop] = None

    async def ensure(
        self,
        version: int,
        extract_to: Optional[Union[str, Path]] = None,
        progress_callback: Optional[ProgressCallback] = None
    ) -> ProvisioningResult:
        """
        Make a verified artifact for version available in the cache.

        Args:
            version: Java major version
            extract_to: Existing directory to unpack the archive into
            progress_callback: Optional (bytes_written, total) download callback

        Returns:
            ProvisioningResult in the DONE state

        Raises:
            ProvisioningError: Subclass tagged with the failing stage
        """
        version = validate_java_version(version)
        start_time = time.time()
        result = ProvisioningResult(version=version, state=PipelineState.CACHE_MISS)

        logger.info(f"{LOG_INPUT} Ensuring Java {version} in {self.store.root}")

        try:
            if self.create_cache_root:
                self.store.ensure_root()
            cached = self.store.exists(version)
        except ProvisioningError as e:
            raise _tag(e, PipelineState.CACHE_MISS, version)

        if cached:
            self._enter(result, PipelineState.CACHE_HIT)
            result.entry = self.store.entry_for(version)
        else:
            self._enter(result, PipelineState.CACHE_MISS)
            await self._acquire(result, progress_callback)

        if extract_to is not None:
            await self._extract(result, Path(extract_to))

        self._enter(result, PipelineState.DONE)
        result.duration = time.time() - start_time

        logger.info(
            f"{LOG_OUTPUT} Java {version} ready: {result.entry.path} "
            f"(catalog calls: {result.catalog_calls}, downloads: {result.download_calls}, "
            f"{result.duration:.2f}s)"
        )
        return result

    async def _acquire(
        self,
        result: ProvisioningResult,
        progress_callback: Optional[ProgressCallback]
    ) -> None:
        """Cache miss path: catalog check, then locked download/verify/commit."""
        version = result.version

        self._enter(result, PipelineState.CHECKING_CATALOG)
        result.catalog_calls += 1
        try:
            available = await self.catalog.available_versions()
        except ProvisioningError as e:
            raise _tag(e, PipelineState.CHECKING_CATALOG, version)

        if version not in available:
            self._enter(result, PipelineState.VERSION_UNAVAILABLE)
            logger.error(f"{LOG_OUTPUT} Java {version} is not offered; available: {sorted(available)}")
            raise VersionNotOffered(
                f"Java {version} is not offered by the registry",
                version=version,
                stage=PipelineState.VERSION_UNAVAILABLE
            )

        async with self._version_lock(version):
            file_lock = self.store.lock(version)
            logger.info(f"{LOG_PROCESS} Waiting for lock: {file_lock.lock_file}")
            try:
                await asyncio.to_thread(file_lock.acquire)
            except FileLockTimeout as e:
                # The holder may have committed just before the wait ran out
                if self.store.exists(version):
                    self._short_circuit(result)
                    return
                raise LockTimeout(
                    f"Timed out after {file_lock.timeout}s waiting for lock {file_lock.lock_file}",
                    version=version,
                    stage=PipelineState.CHECKING_CATALOG
                ) from e

            try:
                if self.store.exists(version):
                    self._short_circuit(result)
                    return

                self.store.sweep_staging(self.staging_max_age)
                await self._download_verify_commit(result, progress_callback)
            finally:
                file_lock.release()

    async def _download_verify_commit(
        self,
        result: ProvisioningResult,
        progress_callback: Optional[ProgressCallback]
    ) -> None:
        version = result.version
        staging_path = self.store.staging_path(version)

        try:
            # DOWNLOADING
            self._enter(result, PipelineState.DOWNLOADING)
            result.download_calls += 1
            try:
                result.download_job = await self.downloader.fetch(
                    self.catalog.binary_url(version),
                    staging_path,
                    progress_callback
                )
            except ProvisioningError as e:
                self._enter(result, PipelineState.DOWNLOAD_FAILED)
                raise _tag(e, PipelineState.DOWNLOAD_FAILED, version)
            self._enter(result, PipelineState.DOWNLOADED)

            # VERIFYING
            self._enter(result, PipelineState.VERIFYING)
            result.catalog_calls += 1
            try:
                checksums = await self.catalog.checksums_for(version)
                result.verification = await asyncio.to_thread(
                    self.verifier.verify, staging_path, checksums
                )
            except ProvisioningError as e:
                raise _tag(e, PipelineState.VERIFYING, version)

            if not result.verification.matched:
                self._enter(result, PipelineState.CHECKSUM_MISMATCH)
                raise ChecksumMismatch(
                    f"Digest {result.verification.digest} of Java {version} archive "
                    f"matches none of {len(checksums)} published checksums",
                    digest=result.verification.digest,
                    version=version,
                    stage=PipelineState.CHECKSUM_MISMATCH
                )
            self._enter(result, PipelineState.VERIFIED)

            # COMMITTED
            try:
                result.entry = self.store.commit(staging_path, version)
            except ProvisioningError as e:
                raise _tag(e, PipelineState.VERIFIED, version)
            self._enter(result, PipelineState.COMMITTED)

        finally:
            if result.entry is None:
                self.store.discard(staging_path)

    async def _extract(self, result: ProvisioningResult, target_dir: Path) -> None:
        self._enter(result, PipelineState.EXTRACTING)
        try:
            result.extraction = await asyncio.to_thread(
                self.extractor.extract, result.entry.path, target_dir
            )
        except ProvisioningError as e:
            self._enter(result, PipelineState.EXTRACTION_FAILED)
            raise _tag(e, PipelineState.EXTRACTION_FAILED, result.version)

    def _short_circuit(self, result: ProvisioningResult) -> None:
        """A concurrent run committed the artifact while this one waited."""
        logger.info(f"{LOG_OUTPUT} Committed by a concurrent run: {self.store.path_for(result.version)}")
        self._enter(result, PipelineState.CACHE_HIT)
        result.entry = self.store.entry_for(result.version)

    def _version_lock(self, version: int) -> asyncio.Lock:
        # asyncio.Lock binds to one loop; a pipeline reused under a new
        # asyncio.run() gets fresh locks
        loop = asyncio.get_running_loop()
        if self._locks_loop is not loop:
            self._locks_loop = loop
            self._version_locks = {}
        if version not in self._version_locks:
            self._version_locks[version] = asyncio.Lock()
        return self._version_locks[version]

    @staticmethod
    def _enter(result: ProvisioningResult, state: PipelineState) -> None:
        result.states.append(state)
        result.state = state
        logger.debug(f"{LOG_PROCESS} Java {result.version}: {state.name}")

    async def close(self):
        """Close network clients this pipeline created."""
        for component in self._owned:
            await component.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


async def ensure(
    version: int,
    cache_root: Union[str, Path],
    config: Optional[ConfigLoader] = None,
    extract_to: Optional[Union[str, Path]] = None,
    progress_callback: Optional[ProgressCallback] = None,
    catalog: Optional[ReleaseCatalog] = None,
    downloader: Optional[HTTPHandler] = None,
    extractor: Optional[Extractor] = None
) -> ProvisioningResult:
    """
    Ensure a verified JDK archive for version exists under cache_root.

    Args:
        version: Java major version
        cache_root: Cache directory
        config: Optional ConfigLoader instance
        extract_to: Existing directory to unpack the archive into
        progress_callback: Optional (bytes_written, total) download callback
        catalog: Release registry client (Adoptium by default)
        downloader: Artifact fetcher (HTTPHandler by default)
        extractor: Archive extractor (tar by default)

    Returns:
        ProvisioningResult in the DONE state

    Raises:
        ProvisioningError: Subclass tagged with the failing stage
    """
    config = config if config else ConfigLoader()
    pipeline = ProvisioningPipeline(
        cache_store=CacheStore(cache_root, config),
        catalog=catalog,
        downloader=downloader,
        extractor=extractor,
        config=config,
    )
    async with pipeline:
        return await pipeline.ensure(version, extract_to, progress_callback)


__all__ = ['ProvisioningPipeline', 'ensure']
