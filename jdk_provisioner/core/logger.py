# Path: jdk_provisioner/core/logger.py
"""
Provisioner Logger

Centralized logging configuration for the JDK provisioner.

Architecture:
- Component-based logging (core, engine, cli, extraction)
- File and console output
- Configurable log levels
- IPO (Input-Process-Output) structured logging
"""

import logging
from typing import Optional

from jdk_provisioner.core.config_loader import ConfigLoader
from jdk_provisioner.constants import (
    LOG_FORMAT,
    LOG_DATE_FORMAT,
    LOGGER_ROOT,
    LOGGER_CORE,
    LOGGER_ENGINE,
    LOGGER_CLI,
    LOGGER_EXTRACTION,
)

_COMPONENT_LOGGERS = {
    'core': LOGGER_CORE,
    'engine': LOGGER_ENGINE,
    'cli': LOGGER_CLI,
    'extraction': LOGGER_EXTRACTION,
}


class ProvisionerLogger:
    """
    Centralized logger for the provisioner.

    Provides component-specific loggers with unified configuration.

    Example:
        logger = get_logger(__name__, 'engine')
        logger.info("[INPUT] Ensuring JDK 21")
        logger.info("[PROCESS] Downloading chunk 1/100")
        logger.info("[OUTPUT] Committed jdk-21.tar.gz")
    """

    def __init__(self, config: Optional[ConfigLoader] = None):
        """
        Initialize provisioner logger.

        Args:
            config: Optional ConfigLoader instance
        """
        self._config = config
        self._configured = False

    @property
    def config(self) -> ConfigLoader:
        if self._config is None:
            self._config = ConfigLoader()
        return self._config

    def configure(self, console_handler: Optional[logging.Handler] = None) -> None:
        """
        Configure the logging tree for the provisioner.

        Args:
            console_handler: Optional replacement for the default stream
                handler (the CLI passes a rich handler)
        """
        if self._configured:
            return

        log_dir = self.config.get('log_dir')
        log_level = getattr(logging, str(self.config.get('log_level', 'INFO')).upper(), logging.INFO)
        console_output = self.config.get('log_console', True)

        logger = logging.getLogger(LOGGER_ROOT)
        logger.setLevel(log_level)
        logger.handlers.clear()

        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

        if log_dir:
            log_dir.mkdir(parents=True, exist_ok=True)

            # All provisioner activity
            file_handler = logging.FileHandler(log_dir / 'provisioner_activity.log')
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

            # Download/verify detail, always at debug
            download_handler = logging.FileHandler(log_dir / 'downloads.log')
            download_handler.setLevel(logging.DEBUG)
            download_handler.setFormatter(formatter)
            logging.getLogger(LOGGER_ENGINE).addHandler(download_handler)

            # Error-only log file
            error_handler = logging.FileHandler(log_dir / 'errors.log')
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(formatter)
            logger.addHandler(error_handler)

        if console_output:
            handler = console_handler if console_handler is not None else logging.StreamHandler()
            handler.setLevel(log_level)
            if console_handler is None:
                handler.setFormatter(formatter)
            logger.addHandler(handler)

        self._configured = True

    def get_logger(self, name: str, component: str = 'core') -> logging.Logger:
        """
        Get logger for specific component.

        Configuration is deferred to configure(); loggers obtained at import
        time pick up handlers once the tree is configured.

        Args:
            name: Module name (typically __name__)
            component: Component type ('core', 'engine', 'cli', 'extraction')

        Returns:
            Logger instance
        """
        prefix = _COMPONENT_LOGGERS.get(component, LOGGER_ROOT)
        short_name = name.rsplit('.', 1)[-1]
        return logging.getLogger(f"{prefix}.{short_name}")


# Global logger instance
_provisioner_logger = ProvisionerLogger()


def get_logger(name: str, component: str = 'core') -> logging.Logger:
    """
    Get logger for provisioner component.

    Args:
        name: Module name (typically __name__)
        component: Component type ('core', 'engine', 'cli', 'extraction')

    Example:
        from jdk_provisioner.core.logger import get_logger

        logger = get_logger(__name__, 'engine')
        logger.info("[INPUT] Fetching catalog")
    """
    return _provisioner_logger.get_logger(name, component)


def configure_logging(
    config: Optional[ConfigLoader] = None,
    console_handler: Optional[logging.Handler] = None
) -> None:
    """
    Configure provisioner logging system.

    Call this once at program start (the CLI does).

    Args:
        config: Optional ConfigLoader instance
        console_handler: Optional console handler replacement
    """
    global _provisioner_logger

    if config:
        _provisioner_logger = ProvisionerLogger(config)

    _provisioner_logger.configure(console_handler=console_handler)


__all__ = ['get_logger', 'configure_logging', 'ProvisionerLogger']
