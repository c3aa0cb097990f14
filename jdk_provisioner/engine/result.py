# Path: jdk_provisioner/engine/result.py
"""
Provisioning Result Objects

Type-safe, structured values passed between pipeline components.

Architecture:
- CacheEntry: committed artifact in the cache root
- BinaryDescriptor / ReleaseInfo: registry view of a version
- DownloadJob: single fetch attempt
- VerificationResult: digest comparison outcome
- ExtractionResult: archive extraction outcome
- ProvisioningResult: complete ensure() run
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from jdk_provisioner.core.errors import InvalidJavaVersion
from jdk_provisioner.constants import CHECKSUM_ALGORITHM


def validate_java_version(version) -> int:
    """
    Validate a Java major version.

    Args:
        version: Candidate version (int, or a string of digits)

    Returns:
        The version as a positive int

    Raises:
        InvalidJavaVersion: If version is not a positive integer
    """
    if isinstance(version, bool):
        raise InvalidJavaVersion(f"Invalid Java version: {version!r}")

    if isinstance(version, str):
        text = version.strip()
        if not text.isdigit():
            raise InvalidJavaVersion(f"Invalid Java version: {version!r}")
        version = int(text)

    if not isinstance(version, int) or version <= 0:
        raise InvalidJavaVersion(f"Invalid Java version: {version!r}")

    return version


class PipelineState(str, Enum):
    """States of one ensure() run."""
    CACHE_HIT = 'cache_hit'
    CACHE_MISS = 'cache_miss'
    CHECKING_CATALOG = 'checking_catalog'
    VERSION_UNAVAILABLE = 'version_unavailable'
    DOWNLOADING = 'downloading'
    DOWNLOAD_FAILED = 'download_failed'
    DOWNLOADED = 'downloaded'
    VERIFYING = 'verifying'
    CHECKSUM_MISMATCH = 'checksum_mismatch'
    VERIFIED = 'verified'
    COMMITTED = 'committed'
    EXTRACTING = 'extracting'
    EXTRACTION_FAILED = 'extraction_failed'
    DONE = 'done'

    def __str__(self) -> str:
        return self.value


class DownloadState(str, Enum):
    """Terminal state of a download job."""
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'


@dataclass(frozen=True)
class CacheEntry:
    """
    Committed artifact for one Java version.

    Attributes:
        version: Java major version
        path: Final path inside the cache root
        exists: Whether the file was present when the entry was produced
    """
    version: int
    path: Path
    exists: bool = True

    def to_dict(self) -> dict:
        return {
            'version': self.version,
            'path': str(self.path),
            'exists': self.exists,
        }


@dataclass(frozen=True)
class BinaryDescriptor:
    """
    One published binary of a release.

    Attributes:
        platform: (os, architecture, image_type) triple
        url: Download link
        checksum: Lowercase hex digest
        algorithm: Digest algorithm tag
    """
    platform: tuple[str, str, str]
    url: str
    checksum: str
    algorithm: str = CHECKSUM_ALGORITHM


@dataclass(frozen=True)
class ReleaseInfo:
    """Registry view of a Java version: its published binaries in order."""
    version: int
    binaries: tuple[BinaryDescriptor, ...] = ()

    @property
    def checksums(self) -> frozenset[str]:
        return frozenset(binary.checksum for binary in self.binaries)

    def for_platform(self, os_name: str, arch: str, image_type: str) -> Optional[BinaryDescriptor]:
        """Return the first binary published for a platform, if any."""
        for binary in self.binaries:
            if binary.platform == (os_name, arch, image_type):
                return binary
        return None


@dataclass
class DownloadJob:
    """
    Result of a single fetch attempt.

    Attributes:
        url: Source URL
        destination: Staging path the bytes were written to
        bytes_written: Observed byte count
        state: Terminal state
        reason: Failure reason when state is FAILED
        status_code: HTTP status code
        content_length: Announced size, if the server sent one
        duration: Transfer duration in seconds
    """
    url: str
    destination: Path
    bytes_written: int = 0
    state: Optional[DownloadState] = None
    reason: Optional[str] = None
    status_code: Optional[int] = None
    content_length: Optional[int] = None
    duration: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def succeeded(self) -> bool:
        return self.state == DownloadState.SUCCEEDED

    @property
    def download_speed_mbps(self) -> float:
        """Calculate download speed in MB/s."""
        if self.duration > 0 and self.bytes_written > 0:
            return (self.bytes_written / (1024 * 1024)) / self.duration
        return 0.0

    def to_dict(self) -> dict:
        return {
            'url': self.url,
            'destination': str(self.destination),
            'bytes_written': self.bytes_written,
            'state': self.state.value if self.state else None,
            'reason': self.reason,
            'status_code': self.status_code,
            'content_length': self.content_length,
            'duration': self.duration,
            'download_speed_mbps': self.download_speed_mbps,
            'timestamp': self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class VerificationResult:
    """
    Outcome of comparing an artifact digest against published checksums.

    Attributes:
        artifact_path: File that was hashed
        digest: Computed lowercase hex digest
        algorithm: Digest algorithm tag
        matched_checksum: The published checksum that matched, or None
    """
    artifact_path: Path
    digest: str
    algorithm: str = CHECKSUM_ALGORITHM
    matched_checksum: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.matched_checksum is not None


@dataclass
class ExtractionResult:
    """
    Result of archive extraction operation.

    Attributes:
        archive_path: Archive that was unpacked
        target_dir: Directory it was unpacked into
        success: Whether extraction succeeded
        return_code: Exit status of the extraction utility
        java_home: Extracted JDK directory, when one was found
        duration: Extraction duration in seconds
        error_message: Error message if failed
    """
    archive_path: Path
    target_dir: Path
    success: bool = False
    return_code: Optional[int] = None
    java_home: Optional[Path] = None
    duration: float = 0.0
    error_message: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'archive_path': str(self.archive_path),
            'target_dir': str(self.target_dir),
            'success': self.success,
            'return_code': self.return_code,
            'java_home': str(self.java_home) if self.java_home else None,
            'duration': self.duration,
            'error_message': self.error_message,
        }


@dataclass
class ProvisioningResult:
    """
    Complete result of one ensure() run.

    Attributes:
        version: Java major version
        state: Final pipeline state (DONE on success)
        entry: Cache entry for the artifact
        states: Every state the run passed through, in order
        download_job: Fetch attempt, when a download happened
        verification: Digest comparison, when a download happened
        extraction: Extraction outcome, when requested
        catalog_calls: Number of registry queries issued
        download_calls: Number of artifact fetches issued
        duration: Total run duration in seconds
    """
    version: int
    state: PipelineState
    entry: Optional[CacheEntry] = None
    states: list[PipelineState] = field(default_factory=list)
    download_job: Optional[DownloadJob] = None
    verification: Optional[VerificationResult] = None
    extraction: Optional[ExtractionResult] = None
    catalog_calls: int = 0
    download_calls: int = 0
    duration: float = 0.0

    @property
    def cache_hit(self) -> bool:
        return PipelineState.CACHE_HIT in self.states

    def to_dict(self) -> dict:
        return {
            'version': self.version,
            'state': self.state.value,
            'entry': self.entry.to_dict() if self.entry else None,
            'states': [state.value for state in self.states],
            'download_job': self.download_job.to_dict() if self.download_job else None,
            'digest': self.verification.digest if self.verification else None,
            'extraction': self.extraction.to_dict() if self.extraction else None,
            'catalog_calls': self.catalog_calls,
            'download_calls': self.download_calls,
            'duration': self.duration,
        }


__all__ = [
    'validate_java_version',
    'PipelineState',
    'DownloadState',
    'CacheEntry',
    'BinaryDescriptor',
    'ReleaseInfo',
    'DownloadJob',
    'VerificationResult',
    'ExtractionResult',
    'ProvisioningResult',
]
