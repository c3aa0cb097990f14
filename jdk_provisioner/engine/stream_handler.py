# Path: jdk_provisioner/engine/stream_handler.py
"""
Stream Handler

Memory-efficient streaming of an archive to disk. Writes chunks as they
arrive without holding the whole file in memory.

Architecture:
- Chunk-based streaming
- Binary writes only (byte-exact copy of the remote resource)
- Progress tracking through an optional callback
- Async I/O with aiofiles
"""

import os
from pathlib import Path
from typing import AsyncIterator, Callable, Optional

import aiofiles

from jdk_provisioner.core.logger import get_logger
from jdk_provisioner.constants import (
    DEFAULT_LOG_PROGRESS_INTERVAL,
    LOG_PROCESS,
)

logger = get_logger(__name__, 'engine')

ProgressCallback = Callable[[int, Optional[int]], None]


class StreamHandler:
    """
    Handles streaming download to disk.

    Example:
        handler = StreamHandler(progress_callback=bar.update)
        written = await handler.stream_to_file(
            response.content.iter_chunked(65536),
            staging_path,
            total_size=content_length
        )
    """

    def __init__(
        self,
        progress_callback: Optional[ProgressCallback] = None,
        log_interval: int = DEFAULT_LOG_PROGRESS_INTERVAL
    ):
        """
        Initialize stream handler.

        Args:
            progress_callback: Called with (bytes_written, total_size) after
                every chunk
            log_interval: Chunks between debug progress lines
        """
        self.progress_callback = progress_callback
        self.log_interval = max(1, log_interval)

        self.bytes_written = 0
        self.chunks_written = 0

    async def stream_to_file(
        self,
        response_stream: AsyncIterator[bytes],
        output_path: Path,
        total_size: Optional[int] = None
    ) -> int:
        """
        Stream response chunks to a new file.

        The file is truncated on open and flushed to stable storage before
        returning, so a later rename publishes complete content.

        Args:
            response_stream: Async iterator of byte chunks
            output_path: Path where file will be written
            total_size: Total expected size (for progress)

        Returns:
            Total bytes written
        """
        logger.info(f"{LOG_PROCESS} Streaming to: {output_path.name}")

        self.reset()

        async with aiofiles.open(output_path, 'wb') as f:
            async for chunk in response_stream:
                if not chunk:
                    continue
                await f.write(chunk)
                self.bytes_written += len(chunk)
                self.chunks_written += 1

                if self.progress_callback is not None:
                    self.progress_callback(self.bytes_written, total_size)

                if self.chunks_written % self.log_interval == 0:
                    if total_size:
                        progress = (self.bytes_written / total_size) * 100
                        logger.debug(
                            f"{LOG_PROCESS} Progress: {progress:.1f}% "
                            f"({self.bytes_written}/{total_size} bytes)"
                        )
                    else:
                        logger.debug(f"{LOG_PROCESS} Downloaded: {self.bytes_written} bytes")

            await f.flush()
            os.fsync(f.fileno())

        logger.info(
            f"{LOG_PROCESS} Stream complete: {self.bytes_written} bytes "
            f"in {self.chunks_written} chunks"
        )

        return self.bytes_written

    def reset(self):
        """Reset progress counters."""
        self.bytes_written = 0
        self.chunks_written = 0


__all__ = ['StreamHandler', 'ProgressCallback']
