# Path: jdk_provisioner/core/__init__.py
"""
Provisioner Core Module

Core utilities for the provisioner including configuration, logging,
typed errors and data path management.
"""

from .config_loader import ConfigLoader
from .data_paths import DataPathsManager, LayoutReport, check_project_structure, ensure_data_paths
from .logger import get_logger, configure_logging
from .errors import (
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

__all__ = [
    'ConfigLoader',
    'DataPathsManager',
    'LayoutReport',
    'check_project_structure',
    'ensure_data_paths',
    'get_logger',
    'configure_logging',
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
