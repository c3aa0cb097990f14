# Path: jdk_provisioner/core/errors.py
"""
Provisioning Errors

Typed failures surfaced by every pipeline component. None of them are
retried by the component that raises them; the orchestration layer decides
(see engine/retry_manager.py), retrying only errors flagged ``transient``.
"""

from typing import Optional


class ProvisioningError(Exception):
    """
    Base class for all provisioning failures.

    Attributes:
        reason: Human-readable failure reason
        stage: Pipeline state in which the failure occurred (set by the
            pipeline when it propagates the error)
        version: Java major version being provisioned, when known
    """

    transient: bool = False

    def __init__(
        self,
        reason: str,
        *,
        version: Optional[int] = None,
        stage: Optional[str] = None
    ):
        super().__init__(reason)
        self.reason = reason
        self.version = version
        self.stage = stage

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.reason}"
        return self.reason


class InvalidJavaVersion(ProvisioningError, ValueError):
    """Raised when a Java version is not a positive integer."""


class CatalogUnreachable(ProvisioningError):
    """Raised when the release registry cannot be reached or answers non-2xx."""

    transient = True


class CatalogMalformed(ProvisioningError):
    """Raised when a registry response does not have the expected shape."""


class VersionNotOffered(ProvisioningError):
    """Raised when the registry does not publish the requested version."""


class DownloadFailed(ProvisioningError):
    """Raised when an artifact transfer fails; the partial file is removed."""

    transient = True

    def __init__(self, reason: str, *, job=None, **kwargs):
        super().__init__(reason, **kwargs)
        self.job = job


class DownloadTimedOut(DownloadFailed):
    """Raised when an artifact transfer exceeds its overall timeout."""


class ChecksumMismatch(ProvisioningError):
    """Raised when a downloaded artifact matches none of the published checksums."""

    def __init__(self, reason: str, *, digest: Optional[str] = None, **kwargs):
        super().__init__(reason, **kwargs)
        self.digest = digest


class TargetMissing(ProvisioningError):
    """Raised when the extraction target directory does not exist."""


class ExtractionFailed(ProvisioningError):
    """Raised when an archive cannot be unpacked."""


class IOUnavailable(ProvisioningError):
    """Raised when the cache root or an artifact cannot be accessed."""


class LockTimeout(IOUnavailable):
    """
    Raised when a concurrent run held the version lock past lock_timeout
    without committing. The next attempt usually finds a cache hit.
    """

    transient = True


__all__ = [
    'ProvisioningError',
    'InvalidJavaVersion',
    'CatalogUnreachable',
    'CatalogMalformed',
    'VersionNotOffered',
    'DownloadFailed',
    'DownloadTimedOut',
    'ChecksumMismatch',
    'TargetMissing',
    'ExtractionFailed',
    'IOUnavailable',
    'LockTimeout',
]
