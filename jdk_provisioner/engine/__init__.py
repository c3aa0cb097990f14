# Path: jdk_provisioner/engine/__init__.py
"""
Provisioner Engine Module

JDK acquisition and verification components.
Exports public APIs for the provisioning workflow.

Architecture:
- ProvisioningPipeline: Main orchestrator
- CacheStore: Committed artifacts and atomic publication
- ReleaseCatalog: Release registry client
- HTTPHandler / StreamHandler: Artifact download
- Verifier: Checksum verification
- Extractor: tar.gz extraction
- RetryManager: Backoff for transient failures (caller side)
"""

from jdk_provisioner.engine.pipeline import ProvisioningPipeline, ensure
from jdk_provisioner.engine.cache_store import CacheStore
from jdk_provisioner.engine.release_catalog import ReleaseCatalog
from jdk_provisioner.engine.protocol_handlers import HTTPHandler
from jdk_provisioner.engine.stream_handler import StreamHandler
from jdk_provisioner.engine.verifier import Verifier
from jdk_provisioner.engine.extraction import Extractor
from jdk_provisioner.engine.retry_manager import RetryManager
from jdk_provisioner.engine.result import (
    PipelineState,
    CacheEntry,
    ReleaseInfo,
    DownloadJob,
    VerificationResult,
    ExtractionResult,
    ProvisioningResult,
)

__all__ = [
    # Main orchestrator
    'ProvisioningPipeline',
    'ensure',

    # Components
    'CacheStore',
    'ReleaseCatalog',
    'HTTPHandler',
    'StreamHandler',
    'Verifier',
    'Extractor',
    'RetryManager',

    # Results
    'PipelineState',
    'CacheEntry',
    'ReleaseInfo',
    'DownloadJob',
    'VerificationResult',
    'ExtractionResult',
    'ProvisioningResult',
]
