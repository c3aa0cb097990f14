# Path: jdk_provisioner/engine/cache_store.py
"""
Cache Store

Owns the committed cache directory tree. Maps a Java version to its
deterministic artifact path, answers presence queries and publishes
verified artifacts.

Architecture:
- Deterministic naming: jdk-{version}.tar.gz
- Staging files live in the same root under collision-resistant names
- Rename in place (os.replace) is the only way a file appears under its
  final name
- Per-version advisory lock files for cross-process exclusivity
"""

import os
import shutil
import stat
import time
import uuid
from pathlib import Path
from typing import Optional, Union

from filelock import FileLock

from jdk_provisioner.core.config_loader import ConfigLoader
from jdk_provisioner.core.errors import IOUnavailable
from jdk_provisioner.core.logger import get_logger
from jdk_provisioner.engine.result import CacheEntry, validate_java_version
from jdk_provisioner.constants import (
    ARTIFACT_GLOB,
    LOCK_NAME_TEMPLATE,
    STAGING_PREFIX,
    STAGING_SUFFIX,
    DEFAULT_LOCK_TIMEOUT,
    LOG_INPUT,
    LOG_PROCESS,
    LOG_OUTPUT,
    artifact_name,
)

logger = get_logger(__name__, 'engine')


class CacheStore:
    """
    Filesystem cache of verified JDK archives.

    No other component writes under the final artifact names; staging
    files are handed back through commit() or discard().

    Example:
        store = CacheStore(Path('~/.cache').expanduser())
        if not store.exists(21):
            staging = store.staging_path(21)
            ...  # download + verify into staging
            entry = store.commit(staging, 21)
    """

    def __init__(
        self,
        cache_root: Optional[Union[str, Path]] = None,
        config: Optional[ConfigLoader] = None
    ):
        """
        Initialize cache store.

        Args:
            cache_root: Cache directory (from config if None)
            config: Optional ConfigLoader instance
        """
        self.config = config if config else ConfigLoader()
        root = cache_root if cache_root is not None else self.config.get('cache_root')
        self.root = Path(root).expanduser()
        self.lock_timeout = self.config.get('lock_timeout', DEFAULT_LOCK_TIMEOUT)

    def ensure_root(self) -> Path:
        """
        Create the cache root if it does not exist.

        Raises:
            IOUnavailable: If the directory cannot be created
        """
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IOUnavailable(f"Cannot create cache root {self.root}: {e}") from e
        return self.root

    def _check_root(self) -> None:
        """Stat the cache root; any failure is IOUnavailable."""
        try:
            mode = os.stat(self.root).st_mode
        except OSError as e:
            raise IOUnavailable(f"Cache root unavailable: {self.root} ({e})") from e

        if not stat.S_ISDIR(mode):
            raise IOUnavailable(f"Cache root is not a directory: {self.root}")

    def path_for(self, version: int) -> Path:
        """Deterministic final path for a version."""
        return self.root / artifact_name(validate_java_version(version))

    def exists(self, version: int) -> bool:
        """
        Check for a committed artifact. Never touches the network.

        Raises:
            IOUnavailable: If the cache root cannot be statted
        """
        self._check_root()
        return self.path_for(version).is_file()

    def entry_for(self, version: int) -> CacheEntry:
        """Describe the cache slot for a version as it is right now."""
        path = self.path_for(version)
        return CacheEntry(version=validate_java_version(version), path=path, exists=path.is_file())

    def staging_path(self, version: int, run_id: Optional[str] = None) -> Path:
        """
        Collision-resistant staging path inside the cache root.

        Args:
            version: Java major version
            run_id: Unique run identifier (random if None)
        """
        run_id = run_id or uuid.uuid4().hex
        name = f"{STAGING_PREFIX}{artifact_name(validate_java_version(version))}-{run_id}{STAGING_SUFFIX}"
        return self.root / name

    def commit(self, staging_path: Path, version: int) -> CacheEntry:
        """
        Publish a verified staged artifact under its final name.

        The staged file is renamed in place; a staged file outside the cache
        root is first copied to a staging name inside it so the final step
        is always a same-directory rename. If an artifact is already
        committed for the version, the staged file is discarded and the
        existing entry returned.

        Args:
            staging_path: Verified artifact
            version: Java major version

        Returns:
            CacheEntry for the committed artifact

        Raises:
            IOUnavailable: If the rename (or copy) fails
        """
        version = validate_java_version(version)
        staging_path = Path(staging_path)
        final_path = self.path_for(version)

        logger.info(f"{LOG_INPUT} Committing {staging_path.name} as {final_path.name}")
        self._check_root()

        if final_path.is_file():
            logger.info(f"{LOG_OUTPUT} Already committed by another run: {final_path}")
            self.discard(staging_path)
            return CacheEntry(version=version, path=final_path, exists=True)

        try:
            if staging_path.parent.resolve() != self.root.resolve():
                local_staging = self.staging_path(version)
                logger.info(f"{LOG_PROCESS} Copying into cache root: {local_staging.name}")
                shutil.copyfile(staging_path, local_staging)
                staging_path.unlink()
                staging_path = local_staging

            os.replace(staging_path, final_path)
        except OSError as e:
            self.discard(staging_path)
            raise IOUnavailable(f"Cannot commit {final_path.name}: {e}", version=version) from e

        logger.info(f"{LOG_OUTPUT} Committed: {final_path}")
        return CacheEntry(version=version, path=final_path, exists=True)

    def discard(self, path: Optional[Path]) -> bool:
        """
        Remove a staged file if present.

        Returns:
            True if a file was removed
        """
        if path is None:
            return False
        try:
            Path(path).unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Cannot remove staged file {path}: {e}")
            return False
        logger.info(f"{LOG_PROCESS} Discarded staged file: {Path(path).name}")
        return True

    def lock(self, version: int, timeout: Optional[float] = None) -> FileLock:
        """
        Advisory lock serialising download/verify/commit for one version.

        Returns:
            Unacquired FileLock; acquire with ``with`` or ``acquire()``. The
            lock is not thread-local, so it may be acquired in a worker
            thread and released from the event loop thread.
        """
        lock_path = self.root / LOCK_NAME_TEMPLATE.format(version=validate_java_version(version))
        return FileLock(
            str(lock_path),
            timeout=self.lock_timeout if timeout is None else timeout,
            thread_local=False,
        )

    def list_entries(self) -> list[CacheEntry]:
        """Committed artifacts in the cache root, sorted by version."""
        self._check_root()
        entries = []
        for path in self.root.glob(ARTIFACT_GLOB):
            version_text = path.name[len('jdk-'):-len('.tar.gz')]
            if not version_text.isdigit() or not path.is_file():
                continue
            entries.append(CacheEntry(version=int(version_text), path=path, exists=True))
        return sorted(entries, key=lambda entry: entry.version)

    def sweep_staging(self, max_age_seconds: float) -> list[Path]:
        """
        Remove staging files older than max_age_seconds.

        Interrupted runs can leave staging files behind; they never carry a
        final name, so removing them is always safe once no run owns them.

        Returns:
            Paths that were removed
        """
        self._check_root()
        cutoff = time.time() - max_age_seconds
        removed = []
        for path in self.root.glob(f"{STAGING_PREFIX}*{STAGING_SUFFIX}"):
            try:
                if path.stat().st_mtime < cutoff:
                    path.unlink()
                    removed.append(path)
            except FileNotFoundError:
                continue
        if removed:
            logger.info(f"{LOG_OUTPUT} Removed {len(removed)} stale staging files")
        return removed


__all__ = ['CacheStore']
