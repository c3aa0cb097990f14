# Path: jdk_provisioner/engine/extraction/extractor.py
"""
Archive Extractor

Unpacks a verified JDK archive (.tar.gz) into an existing directory using
the external tar utility. Its exit status is the only success signal.

CRITICAL PRINCIPLE: Extractor ONLY extracts archives.
It does NOT:
- Verify checksums (Verifier runs first)
- Create the target directory
- Download anything
"""

import subprocess
import time
from pathlib import Path
from typing import Callable, Optional, Sequence

from jdk_provisioner.core.errors import ExtractionFailed, TargetMissing
from jdk_provisioner.core.logger import get_logger
from jdk_provisioner.engine.result import ExtractionResult
from jdk_provisioner.constants import LOG_INPUT, LOG_PROCESS, LOG_OUTPUT
from jdk_provisioner.engine.extraction.constants import (
    TAR_EXECUTABLE,
    TAR_EXTRACT_GZIP_FLAGS,
    TAR_DIRECTORY_FLAG,
    STDERR_TAIL_LINES,
    JAVA_BINARY_CANDIDATES,
)

logger = get_logger(__name__, 'extraction')

CommandRunner = Callable[[Sequence[str]], subprocess.CompletedProcess]


def run_command(args: Sequence[str]) -> subprocess.CompletedProcess:
    """Run a command to completion, capturing its output."""
    return subprocess.run(list(args), capture_output=True, text=True, check=False)


def find_java_home(target_dir: Path) -> Optional[Path]:
    """
    Locate an extracted JDK inside target_dir.

    Checks target_dir itself and its immediate subdirectories (the archive
    usually unpacks to a single jdk-<release> directory).

    Returns:
        Directory whose bin/java exists, or None
    """
    target_dir = Path(target_dir)
    candidates = [target_dir]
    if target_dir.is_dir():
        candidates.extend(sorted(p for p in target_dir.iterdir() if p.is_dir()))

    for candidate in candidates:
        for parts in JAVA_BINARY_CANDIDATES:
            if candidate.joinpath(*parts).is_file():
                return candidate.joinpath(*parts[:-2])
    return None


class Extractor:
    """
    tar.gz extractor.

    Example:
        extractor = Extractor()
        result = extractor.extract(
            archive_path=entry.path,
            target_dir=Path('java')
        )
        print(result.java_home)
    """

    def __init__(self, runner: Optional[CommandRunner] = None):
        """
        Initialize extractor.

        Args:
            runner: Command runner (subprocess.run wrapper by default)
        """
        self.runner = runner if runner else run_command

    def build_command(self, archive_path: Path, target_dir: Path) -> list[str]:
        return [
            TAR_EXECUTABLE,
            TAR_EXTRACT_GZIP_FLAGS,
            str(archive_path),
            TAR_DIRECTORY_FLAG,
            str(target_dir),
        ]

    def extract(self, archive_path: Path, target_dir: Path) -> ExtractionResult:
        """
        Extract a tar.gz archive into target_dir.

        Args:
            archive_path: Verified archive
            target_dir: Existing directory to unpack into

        Returns:
            ExtractionResult with success=True

        Raises:
            TargetMissing: If target_dir is not an existing directory
            ExtractionFailed: If the archive is missing or tar exits non-zero
        """
        archive_path = Path(archive_path)
        target_dir = Path(target_dir)

        logger.info(f"{LOG_INPUT} Extracting: {archive_path.name}")
        logger.info(f"{LOG_PROCESS} Target: {target_dir}")

        if not target_dir.is_dir():
            raise TargetMissing(f"Extraction target does not exist: {target_dir}")

        if not archive_path.is_file():
            raise ExtractionFailed(f"Archive not found: {archive_path}")

        start_time = time.time()
        result = ExtractionResult(archive_path=archive_path, target_dir=target_dir)

        try:
            completed = self.runner(self.build_command(archive_path, target_dir))
        except OSError as e:
            raise ExtractionFailed(f"Cannot run {TAR_EXECUTABLE}: {e}") from e

        result.return_code = completed.returncode
        result.duration = time.time() - start_time

        if completed.returncode != 0:
            stderr_lines = (completed.stderr or '').strip().splitlines()
            detail = ' | '.join(stderr_lines[-STDERR_TAIL_LINES:]) or 'no output'
            result.error_message = f"{TAR_EXECUTABLE} exited with {completed.returncode}: {detail}"
            logger.error(f"{LOG_OUTPUT} {result.error_message}")
            raise ExtractionFailed(result.error_message)

        result.success = True
        result.java_home = find_java_home(target_dir)

        logger.info(
            f"{LOG_OUTPUT} Extraction complete in {result.duration:.2f}s"
            + (f", JAVA_HOME={result.java_home}" if result.java_home else "")
        )
        return result


__all__ = ['Extractor', 'CommandRunner', 'run_command', 'find_java_home']
