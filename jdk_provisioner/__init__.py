# Path: jdk_provisioner/__init__.py
"""
JDK Provisioner

Fetches, verifies and caches Eclipse Temurin JDK archives for a
server-hosting tool.

Usage:
    import asyncio
    from jdk_provisioner import ensure

    result = asyncio.run(ensure(21, '~/.cache'))
    print(result.entry.path)
"""

from jdk_provisioner.engine import ProvisioningPipeline, ensure, PipelineState, ProvisioningResult
from jdk_provisioner.core.errors import (
    ProvisioningError,
    InvalidJavaVersion,
    CatalogUnreachable,
    CatalogMalformed,
    VersionNotOffered,
    DownloadFailed,
    DownloadTimedOut,
    ChecksumMismatch,
    TargetMissing,
    ExtractionFailed,
    IOUnavailable,
    LockTimeout,
)

__version__ = '0.1.0'

__all__ = [
    'ProvisioningPipeline',
    'ensure',
    'PipelineState',
    'ProvisioningResult',
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
