# Path: jdk_provisioner/core/config_loader.py
"""
Provisioner Configuration Loader

Centralized configuration management for the JDK provisioner.
Loads and validates environment variables with type safety and defaults.

Architecture:
- Shared default instance for the process (singleton pattern)
- Isolated instances through explicit overrides (tests, embedding callers)
- Type-safe access with validation
- Sensible defaults
"""

import os
import platform
from typing import Any, Optional
from pathlib import Path
from dotenv import load_dotenv

from jdk_provisioner.constants import (
    ENV_CACHE_DIR,
    ENV_CREATE_CACHE_ROOT,
    ENV_LOG_DIR,
    ENV_API_BASE_URL,
    ENV_PLATFORM_OS,
    ENV_PLATFORM_ARCH,
    ENV_IMAGE_TYPE,
    ENV_USER_AGENT,
    ENV_CATALOG_TIMEOUT,
    ENV_DOWNLOAD_TIMEOUT,
    ENV_CONNECT_TIMEOUT,
    ENV_LOCK_TIMEOUT,
    ENV_CHUNK_SIZE,
    ENV_LOG_PROGRESS_INTERVAL,
    ENV_RETRY_ATTEMPTS,
    ENV_RETRY_DELAY,
    ENV_MAX_RETRY_DELAY,
    ENV_STAGING_MAX_AGE_HOURS,
    ENV_LOG_LEVEL,
    ENV_LOG_CONSOLE,
    DEFAULT_CACHE_ROOT,
    DEFAULT_CATALOG_TIMEOUT,
    DEFAULT_DOWNLOAD_TIMEOUT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_LOG_PROGRESS_INTERVAL,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY,
    DEFAULT_MAX_RETRY_DELAY,
    DEFAULT_STAGING_MAX_AGE_HOURS,
    DEFAULT_API_BASE_URL,
    DEFAULT_IMAGE_TYPE,
    DEFAULT_USER_AGENT,
    DEFAULT_OS,
    DEFAULT_ARCH,
    lock_timeout_for,
    OS_MAP,
    ARCH_MAP,
)


class ConfigLoader:
    """
    Configuration loader with a shared default instance.

    ``ConfigLoader()`` always returns the same process-wide instance.
    ``ConfigLoader(overrides={...})`` or ``ConfigLoader(env_file=...)``
    build an isolated instance whose values take precedence over the
    environment.

    Example:
        config = ConfigLoader()
        cache_root = config.get('cache_root')
        timeout = config.get('download_timeout')
    """

    _instance: Optional['ConfigLoader'] = None

    def __new__(
        cls,
        env_file: Optional[Path] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> 'ConfigLoader':
        """Share one instance unless an env file or overrides are given."""
        if env_file is not None or overrides is not None:
            instance = super().__new__(cls)
            instance._initialized = False
            return instance

        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(
        self,
        env_file: Optional[Path] = None,
        overrides: Optional[dict[str, Any]] = None
    ):
        """
        Initialize configuration loader.

        Args:
            env_file: Optional path to a .env file (defaults to ./.env)
            overrides: Optional values replacing loaded configuration keys
        """
        if self._initialized:
            return

        env_path = Path(env_file) if env_file else Path.cwd() / '.env'
        if env_path.exists():
            load_dotenv(dotenv_path=env_path, interpolate=True)

        self._config = self._load_configuration()
        if overrides:
            self._config.update(overrides)
        if self._config.get('lock_timeout') is None:
            self._config['lock_timeout'] = lock_timeout_for(
                self._config['download_timeout'], self._config['catalog_timeout']
            )
        self._initialized = True

    @classmethod
    def reset(cls) -> None:
        """Drop the shared instance so the next call reloads the environment."""
        cls._instance = None

    def _load_configuration(self) -> dict[str, Any]:
        """
        Load and validate all configuration from environment.

        Returns:
            Dictionary of validated configuration values
        """
        config = {
            # ================================================================
            # DIRECTORY PATHS
            # ================================================================
            'cache_root': self._get_path(ENV_CACHE_DIR) or DEFAULT_CACHE_ROOT,
            'create_cache_root': self._get_bool(ENV_CREATE_CACHE_ROOT, True),
            'log_dir': self._get_path(ENV_LOG_DIR),

            # ================================================================
            # RELEASE REGISTRY
            # ================================================================
            'api_base_url': self._get_env(ENV_API_BASE_URL, DEFAULT_API_BASE_URL).rstrip('/'),
            'platform_os': self._get_env(ENV_PLATFORM_OS, self._detect_os()),
            'platform_arch': self._get_env(ENV_PLATFORM_ARCH, self._detect_arch()),
            'image_type': self._get_env(ENV_IMAGE_TYPE, DEFAULT_IMAGE_TYPE),
            'user_agent': self._get_env(ENV_USER_AGENT, DEFAULT_USER_AGENT),

            # ================================================================
            # TIMEOUTS
            # ================================================================
            'catalog_timeout': self._get_float(ENV_CATALOG_TIMEOUT, DEFAULT_CATALOG_TIMEOUT),
            'download_timeout': self._get_float(ENV_DOWNLOAD_TIMEOUT, DEFAULT_DOWNLOAD_TIMEOUT),
            'connect_timeout': self._get_float(ENV_CONNECT_TIMEOUT, DEFAULT_CONNECT_TIMEOUT),
            # None until derived from the download and catalog timeouts
            'lock_timeout': self._get_float(ENV_LOCK_TIMEOUT, None),

            # ================================================================
            # TRANSFER
            # ================================================================
            'chunk_size': self._get_int(ENV_CHUNK_SIZE, DEFAULT_CHUNK_SIZE),
            'log_progress_interval': self._get_int(
                ENV_LOG_PROGRESS_INTERVAL, DEFAULT_LOG_PROGRESS_INTERVAL
            ),

            # ================================================================
            # RETRIES (orchestration layer)
            # ================================================================
            'retry_attempts': self._get_int(ENV_RETRY_ATTEMPTS, DEFAULT_RETRY_ATTEMPTS),
            'retry_delay': self._get_float(ENV_RETRY_DELAY, DEFAULT_RETRY_DELAY),
            'max_retry_delay': self._get_float(ENV_MAX_RETRY_DELAY, DEFAULT_MAX_RETRY_DELAY),

            # ================================================================
            # CLEANUP
            # ================================================================
            'staging_max_age_hours': self._get_int(
                ENV_STAGING_MAX_AGE_HOURS, DEFAULT_STAGING_MAX_AGE_HOURS
            ),

            # ================================================================
            # LOGGING CONFIGURATION
            # ================================================================
            'log_level': self._get_env(ENV_LOG_LEVEL, 'INFO'),
            'log_console': self._get_bool(ENV_LOG_CONSOLE, True),
        }

        return config

    @staticmethod
    def _detect_os() -> str:
        return OS_MAP.get(platform.system(), DEFAULT_OS)

    @staticmethod
    def _detect_arch() -> str:
        return ARCH_MAP.get(platform.machine(), DEFAULT_ARCH)

    def _get_env(self, key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
        """
        Get string environment variable.

        Args:
            key: Environment variable name
            default: Default value if not found
            required: If True, raises ValueError when missing

        Returns:
            Environment variable value or default

        Raises:
            ValueError: If required and not found
        """
        value = os.getenv(key)

        if value is None or not value.strip():
            if required:
                raise ValueError(f"Required environment variable not set: {key}")
            return default

        return value.strip()

    def _get_bool(self, key: str, default: bool) -> bool:
        """Get boolean environment variable."""
        value = os.getenv(key)
        if value is None:
            return default

        return value.strip().lower() in ('true', '1', 'yes', 'on')

    def _get_int(self, key: str, default: int) -> int:
        """Get integer environment variable, falling back on invalid input."""
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return int(value.strip())
        except ValueError:
            return default

    def _get_float(self, key: str, default: Optional[float]) -> Optional[float]:
        """Get float environment variable, falling back on invalid input."""
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return float(value.strip())
        except ValueError:
            return default

    def _get_path(self, key: str, required: bool = False) -> Optional[Path]:
        """
        Get path environment variable.

        Args:
            key: Environment variable name
            required: If True, raises ValueError when missing

        Returns:
            Path object (user-expanded) or None

        Raises:
            ValueError: If required and not found
        """
        value = os.getenv(key)

        if value is None or not value.strip():
            if required:
                raise ValueError(f"Required environment variable not set: {key}")
            return None

        return Path(value.strip()).expanduser()

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value.

        Example:
            config = ConfigLoader()
            cache_root = config.get('cache_root')
        """
        return self._config.get(key, default)


__all__ = ['ConfigLoader']
