# Path: jdk_provisioner/constants.py
"""
JDK Provisioner Constants

Module-wide constants for JDK acquisition and verification.
Engine-specific constants (endpoints, headers) live in engine/constants.py.

No hardcoded paths - all paths come from .env via config_loader.
"""

from pathlib import Path

# ============================================================================
# HTTP STATUS
# ============================================================================
HTTP_OK: int = 200

# ============================================================================
# DOWNLOAD CONFIGURATION DEFAULTS
# ============================================================================
DEFAULT_CHUNK_SIZE: int = 65536  # 64KB chunks for streaming archives
DEFAULT_CATALOG_TIMEOUT: float = 30.0  # Catalog queries are small JSON documents
DEFAULT_DOWNLOAD_TIMEOUT: float = 900.0  # A full JDK is ~200MB
DEFAULT_CONNECT_TIMEOUT: float = 30.0
LOCK_TIMEOUT_MARGIN: float = 60.0
# A waiting run must outlast the holder's download and checksum lookup
DEFAULT_LOCK_TIMEOUT: float = DEFAULT_DOWNLOAD_TIMEOUT + 2 * DEFAULT_CATALOG_TIMEOUT + LOCK_TIMEOUT_MARGIN
DEFAULT_RETRY_ATTEMPTS: int = 3
DEFAULT_RETRY_DELAY: float = 1.0
DEFAULT_MAX_RETRY_DELAY: float = 60.0

# ============================================================================
# LOGGING DEFAULTS
# ============================================================================
DEFAULT_LOG_PROGRESS_INTERVAL: int = 256  # chunks between progress lines

# ============================================================================
# CACHE LAYOUT
# ============================================================================
DEFAULT_CACHE_ROOT: Path = Path.home() / '.cache'
ARTIFACT_NAME_TEMPLATE: str = 'jdk-{version}.tar.gz'
ARTIFACT_GLOB: str = 'jdk-*.tar.gz'
STAGING_PREFIX: str = '.staging-'
STAGING_SUFFIX: str = '.part'
LOCK_NAME_TEMPLATE: str = '.jdk-{version}.lock'
DEFAULT_STAGING_MAX_AGE_HOURS: int = 24

# ============================================================================
# CHECKSUMS
# ============================================================================
CHECKSUM_ALGORITHM: str = 'sha256'
CHECKSUM_HEX_LENGTHS: dict = {
    'sha256': 64,
}
HASH_CHUNK_SIZE: int = 1024 * 1024

# ============================================================================
# RELEASE REGISTRY DEFAULTS (Eclipse Adoptium API v3)
# ============================================================================
DEFAULT_API_BASE_URL: str = 'https://api.adoptium.net/v3'
DEFAULT_USER_AGENT: str = 'jdk-provisioner/0.1'
DEFAULT_IMAGE_TYPE: str = 'jdk'
DEFAULT_OS: str = 'linux'
DEFAULT_ARCH: str = 'x64'

# platform.system() -> registry OS identifier
OS_MAP: dict = {
    'Linux': 'linux',
    'Darwin': 'mac',
    'Windows': 'windows',
}

# platform.machine() -> registry architecture identifier
ARCH_MAP: dict = {
    'x86_64': 'x64',
    'AMD64': 'x64',
    'amd64': 'x64',
    'i386': 'x32',
    'i686': 'x32',
    'aarch64': 'aarch64',
    'arm64': 'aarch64',
    'armv7l': 'arm',
    'ppc64le': 'ppc64le',
    's390x': 's390x',
}

# ============================================================================
# PROJECT LAYOUT (server-hosting tool working directory)
# ============================================================================
PROJECT_CONFIG_FILE: str = 'config.toml'
PROJECT_REQUIRED_DIRS: tuple = ('server', 'cache', 'log', 'java')

# ============================================================================
# IPO LOGGING PREFIXES
# ============================================================================
LOG_INPUT: str = '[INPUT]'
LOG_PROCESS: str = '[PROCESS]'
LOG_OUTPUT: str = '[OUTPUT]'

# ============================================================================
# LOGGING COMPONENTS
# ============================================================================
LOGGER_ROOT: str = 'jdk_provisioner'
LOGGER_CORE: str = 'jdk_provisioner.core'
LOGGER_ENGINE: str = 'jdk_provisioner.engine'
LOGGER_CLI: str = 'jdk_provisioner.cli'
LOGGER_EXTRACTION: str = 'jdk_provisioner.extraction'

# ============================================================================
# LOG FORMAT
# ============================================================================
LOG_FORMAT: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT: str = '%Y-%m-%d %H:%M:%S'

# ============================================================================
# ENVIRONMENT VARIABLE KEYS (for reference in config_loader.py)
# ============================================================================
# Directory Paths
ENV_CACHE_DIR: str = 'JDK_CACHE_DIR'
ENV_CREATE_CACHE_ROOT: str = 'JDK_CREATE_CACHE_ROOT'
ENV_LOG_DIR: str = 'JDK_LOG_DIR'

# Registry
ENV_API_BASE_URL: str = 'JDK_API_BASE_URL'
ENV_PLATFORM_OS: str = 'JDK_OS'
ENV_PLATFORM_ARCH: str = 'JDK_ARCH'
ENV_IMAGE_TYPE: str = 'JDK_IMAGE_TYPE'
ENV_USER_AGENT: str = 'JDK_USER_AGENT'

# Timeouts
ENV_CATALOG_TIMEOUT: str = 'JDK_CATALOG_TIMEOUT'
ENV_DOWNLOAD_TIMEOUT: str = 'JDK_DOWNLOAD_TIMEOUT'
ENV_CONNECT_TIMEOUT: str = 'JDK_CONNECT_TIMEOUT'
ENV_LOCK_TIMEOUT: str = 'JDK_LOCK_TIMEOUT'

# Transfer
ENV_CHUNK_SIZE: str = 'JDK_CHUNK_SIZE'
ENV_LOG_PROGRESS_INTERVAL: str = 'JDK_LOG_PROGRESS_INTERVAL'

# Retries (orchestration layer only)
ENV_RETRY_ATTEMPTS: str = 'JDK_RETRY_ATTEMPTS'
ENV_RETRY_DELAY: str = 'JDK_RETRY_DELAY'
ENV_MAX_RETRY_DELAY: str = 'JDK_MAX_RETRY_DELAY'

# Cleanup
ENV_STAGING_MAX_AGE_HOURS: str = 'JDK_STAGING_MAX_AGE_HOURS'

# Logging
ENV_LOG_LEVEL: str = 'JDK_LOG_LEVEL'
ENV_LOG_CONSOLE: str = 'JDK_LOG_CONSOLE'


def artifact_name(version: int) -> str:
    """
    Deterministic cache file name for a Java major version.

    Example:
        artifact_name(17)  # Returns: 'jdk-17.tar.gz'
    """
    return ARTIFACT_NAME_TEMPLATE.format(version=version)


def lock_timeout_for(download_timeout: float, catalog_timeout: float) -> float:
    """
    Lock wait long enough for a concurrent run to finish its acquisition.

    Example:
        lock_timeout_for(900.0, 30.0)  # Returns: 1020.0
    """
    return download_timeout + 2 * catalog_timeout + LOCK_TIMEOUT_MARGIN
