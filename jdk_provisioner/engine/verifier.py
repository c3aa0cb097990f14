# Path: jdk_provisioner/engine/verifier.py
"""
Artifact Verifier

Computes the digest of a downloaded archive in one streaming pass and
compares it against the checksums the registry publishes.

A non-matching artifact is reported, never repaired: the pipeline turns
an unmatched result into ChecksumMismatch and discards the staged file.
"""

import hashlib
from pathlib import Path
from typing import Iterable

from jdk_provisioner.core.errors import CatalogMalformed, IOUnavailable
from jdk_provisioner.core.logger import get_logger
from jdk_provisioner.engine.result import VerificationResult
from jdk_provisioner.constants import (
    CHECKSUM_ALGORITHM,
    HASH_CHUNK_SIZE,
    LOG_INPUT,
    LOG_OUTPUT,
)

logger = get_logger(__name__, 'engine')


class Verifier:
    """
    Checksum verifier.

    Example:
        verifier = Verifier()
        result = verifier.verify(staging_path, await catalog.checksums_for(21))
        if not result.matched:
            ...
    """

    def __init__(self, algorithm: str = CHECKSUM_ALGORITHM, chunk_size: int = HASH_CHUNK_SIZE):
        if algorithm not in hashlib.algorithms_available:
            raise ValueError(f"Unsupported digest algorithm: {algorithm}")
        self.algorithm = algorithm
        self.chunk_size = chunk_size

    def digest(self, artifact_path: Path) -> str:
        """
        Lowercase hex digest of a file, read in fixed-size chunks.

        Raises:
            IOUnavailable: If the file cannot be read
        """
        hasher = hashlib.new(self.algorithm)
        try:
            with open(artifact_path, 'rb') as f:
                for chunk in iter(lambda: f.read(self.chunk_size), b''):
                    hasher.update(chunk)
        except OSError as e:
            raise IOUnavailable(f"Cannot read artifact {artifact_path}: {e}") from e
        return hasher.hexdigest()

    def verify(self, artifact_path: Path, expected_checksums: Iterable[str]) -> VerificationResult:
        """
        Compare an artifact against published checksums.

        Args:
            artifact_path: Downloaded archive
            expected_checksums: Hex digests published for the version;
                compared case-insensitively

        Returns:
            VerificationResult; matched_checksum is None when nothing matched

        Raises:
            CatalogMalformed: If no checksums were supplied
            IOUnavailable: If the artifact cannot be read
        """
        artifact_path = Path(artifact_path)
        expected = {checksum.strip().lower() for checksum in expected_checksums}
        if not expected:
            raise CatalogMalformed("No checksums to verify against")

        logger.info(
            f"{LOG_INPUT} Verifying {artifact_path.name} against "
            f"{len(expected)} published {self.algorithm} checksums"
        )

        computed = self.digest(artifact_path)
        matched = computed if computed in expected else None

        if matched:
            logger.info(f"{LOG_OUTPUT} Checksum verified: {computed}")
        else:
            logger.error(f"{LOG_OUTPUT} Checksum mismatch: {computed} not published")

        return VerificationResult(
            artifact_path=artifact_path,
            digest=computed,
            algorithm=self.algorithm,
            matched_checksum=matched,
        )


__all__ = ['Verifier']
