# Path: jdk_provisioner/core/data_paths.py
"""
Provisioner Data Paths Manager

Directory creation and validation for the provisioner, plus the working
directory layout check of the server-hosting tool.

Architecture:
- Minimal directory creation (only what's needed)
- Create on first use pattern
- Health checks for directory accessibility
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from jdk_provisioner.core.config_loader import ConfigLoader
from jdk_provisioner.constants import PROJECT_CONFIG_FILE, PROJECT_REQUIRED_DIRS


@dataclass
class LayoutReport:
    """
    Result of a project layout check.

    Attributes:
        root: Directory that was checked
        missing_files: Required files that are absent
        missing_dirs: Required directories that are absent
    """
    root: Path
    missing_files: list[str] = field(default_factory=list)
    missing_dirs: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.missing_files and not self.missing_dirs


def check_project_structure(root: Path) -> LayoutReport:
    """
    Check the server-hosting tool's working directory layout.

    A valid project has a config.toml and the server, cache, log and java
    directories.

    Args:
        root: Project directory

    Returns:
        LayoutReport listing whatever is missing
    """
    root = Path(root)
    report = LayoutReport(root=root)

    if not (root / PROJECT_CONFIG_FILE).is_file():
        report.missing_files.append(PROJECT_CONFIG_FILE)

    for name in PROJECT_REQUIRED_DIRS:
        if not (root / name).is_dir():
            report.missing_dirs.append(name)

    return report


class DataPathsManager:
    """
    Manages directory creation and validation for the provisioner.

    Example:
        manager = DataPathsManager()
        manager.ensure_all_directories()
        health = manager.health_check()
    """

    def __init__(self, config: Optional[ConfigLoader] = None):
        """
        Initialize data paths manager.

        Args:
            config: Optional ConfigLoader instance
        """
        self.config = config if config else ConfigLoader()
        self._created_dirs: list[Path] = []
        self._existing_dirs: list[Path] = []
        self._failed_dirs: list[tuple[Path, str]] = []

    def _required_directories(self) -> list[Path]:
        required_dirs = []
        if self.config.get('create_cache_root', True):
            required_dirs.append(self.config.get('cache_root'))
        required_dirs.append(self.config.get('log_dir'))
        return [Path(d) for d in required_dirs if d is not None]

    def ensure_all_directories(self) -> dict:
        """
        Create the cache root (when enabled) and the log directory.

        Returns:
            Dictionary with creation statistics
        """
        self._created_dirs = []
        self._existing_dirs = []
        self._failed_dirs = []

        required_dirs = self._required_directories()
        for directory in required_dirs:
            self._ensure_directory(directory)

        return {
            'created': self._created_dirs,
            'existing': self._existing_dirs,
            'failed': self._failed_dirs,
            'total_required': len(required_dirs),
        }

    def _ensure_directory(self, path: Path) -> bool:
        """
        Ensure a single directory exists.

        Returns:
            True if directory exists or was created, False if failed
        """
        try:
            if path.exists():
                if path.is_dir():
                    self._existing_dirs.append(path)
                    return True
                self._failed_dirs.append((path, f"Path exists but is not a directory: {path}"))
                return False

            path.mkdir(parents=True, exist_ok=True)
            self._created_dirs.append(path)
            return True

        except PermissionError as e:
            self._failed_dirs.append((path, f"Permission denied: {e}"))
            return False
        except OSError as e:
            self._failed_dirs.append((path, f"OS error: {e}"))
            return False

    def health_check(self) -> dict:
        """
        Check accessibility of configured directories.

        Returns:
            Dictionary with 'status' ('healthy' or 'degraded') and 'issues'
        """
        issues = []
        cache_root = self.config.get('cache_root')

        for directory in [cache_root, self.config.get('log_dir')]:
            if directory is None:
                continue
            directory = Path(directory)
            if not directory.is_dir():
                issues.append(f"Missing directory: {directory}")
            elif not os.access(directory, os.R_OK | os.W_OK | os.X_OK):
                issues.append(f"Directory not writable: {directory}")

        return {
            'status': 'healthy' if not issues else 'degraded',
            'issues': issues,
        }


def ensure_data_paths(config: Optional[ConfigLoader] = None) -> dict:
    """Create required directories using the given or default configuration."""
    return DataPathsManager(config).ensure_all_directories()


__all__ = [
    'DataPathsManager',
    'LayoutReport',
    'check_project_structure',
    'ensure_data_paths',
]
