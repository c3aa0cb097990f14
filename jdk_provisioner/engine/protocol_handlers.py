# Path: jdk_provisioner/engine/protocol_handlers.py
"""
Protocol Handlers

HTTP/HTTPS artifact downloader with streaming support.

Architecture:
- Async HTTP client (aiohttp) with streaming to a staging path
- Content passed through untouched (no transfer decoding)
- Whole-file semantics: any failure deletes the partial file
- Overall timeout per fetch
- No internal retries
"""

import asyncio
import time
from pathlib import Path
from typing import Optional

import aiohttp

from jdk_provisioner.core.config_loader import ConfigLoader
from jdk_provisioner.core.errors import DownloadFailed, DownloadTimedOut
from jdk_provisioner.core.logger import get_logger
from jdk_provisioner.engine.result import DownloadJob, DownloadState
from jdk_provisioner.engine.stream_handler import StreamHandler, ProgressCallback
from jdk_provisioner.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_DOWNLOAD_TIMEOUT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_LOG_PROGRESS_INTERVAL,
    DEFAULT_USER_AGENT,
    HTTP_OK,
    LOG_INPUT,
    LOG_PROCESS,
    LOG_OUTPUT,
)
from jdk_provisioner.engine.constants import (
    HEADER_USER_AGENT,
    HEADER_ACCEPT,
    HEADER_CONTENT_LENGTH,
    ACCEPT_BINARY,
)

logger = get_logger(__name__, 'engine')


class HTTPHandler:
    """
    Downloads one artifact per fetch() call into a staging path.

    Example:
        async with HTTPHandler() as handler:
            job = await handler.fetch(
                url='https://api.adoptium.net/v3/binary/latest/21/ga/linux/x64/jdk/hotspot/normal/eclipse',
                destination=store.staging_path(21)
            )
    """

    def __init__(
        self,
        config: Optional[ConfigLoader] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize HTTP handler.

        Args:
            config: Optional ConfigLoader instance
            session: Optional shared aiohttp session (not closed by close())
        """
        self.config = config if config else ConfigLoader()

        self.chunk_size = self.config.get('chunk_size', DEFAULT_CHUNK_SIZE)
        self.timeout = self.config.get('download_timeout', DEFAULT_DOWNLOAD_TIMEOUT)
        self.connect_timeout = self.config.get('connect_timeout', DEFAULT_CONNECT_TIMEOUT)
        self.log_interval = self.config.get('log_progress_interval', DEFAULT_LOG_PROGRESS_INTERVAL)
        self.user_agent = self.config.get('user_agent', DEFAULT_USER_AGENT)

        self._session = session
        self._owns_session = session is None

    async def fetch(
        self,
        url: str,
        destination: Path,
        progress_callback: Optional[ProgressCallback] = None
    ) -> DownloadJob:
        """
        Stream a remote resource to destination.

        Args:
            url: Source URL
            destination: Staging path (never a final cache name)
            progress_callback: Optional (bytes_written, total) callback

        Returns:
            DownloadJob in the SUCCEEDED state

        Raises:
            DownloadTimedOut: Overall timeout exceeded (partial file removed)
            DownloadFailed: Non-200 status, malformed Content-Length,
                connect timeout or transport/write error (partial file
                removed)
        """
        destination = Path(destination)
        logger.info(f"{LOG_INPUT} Downloading: {url}")
        logger.info(f"{LOG_INPUT} Staging: {destination}")

        start_time = time.time()
        job = DownloadJob(url=url, destination=destination)

        try:
            await asyncio.wait_for(
                self._transfer(job, progress_callback),
                timeout=self.timeout
            )

        except aiohttp.ServerTimeoutError as e:
            # Connect timeouts subclass asyncio.TimeoutError
            self._fail(job, f"Connection timed out after {self.connect_timeout}s: {e}", start_time)
            raise DownloadFailed(job.reason, job=job) from e

        except asyncio.TimeoutError as e:
            self._fail(job, f"Timed out after {self.timeout}s", start_time)
            raise DownloadTimedOut(job.reason, job=job) from e

        except DownloadFailed:
            self._fail(job, job.reason, start_time)
            raise

        except aiohttp.ClientError as e:
            self._fail(job, f"HTTP error: {e}", start_time)
            raise DownloadFailed(job.reason, job=job) from e

        except OSError as e:
            self._fail(job, f"Write error: {e}", start_time)
            raise DownloadFailed(job.reason, job=job) from e

        except asyncio.CancelledError:
            self._remove_partial(destination)
            raise

        job.state = DownloadState.SUCCEEDED
        job.duration = time.time() - start_time

        logger.info(
            f"{LOG_OUTPUT} Download complete: {job.bytes_written} bytes "
            f"in {job.duration:.2f}s ({job.download_speed_mbps:.2f} MB/s)"
        )
        return job

    async def _transfer(self, job: DownloadJob, progress_callback: Optional[ProgressCallback]) -> None:
        session = await self._get_session()

        logger.info(f"{LOG_PROCESS} Sending HTTP GET request")
        async with session.get(
            job.url,
            headers={HEADER_USER_AGENT: self.user_agent, HEADER_ACCEPT: ACCEPT_BINARY},
            timeout=aiohttp.ClientTimeout(total=None, connect=self.connect_timeout),
        ) as response:
            job.status_code = response.status

            if response.status != HTTP_OK:
                job.reason = f"HTTP {response.status}"
                raise DownloadFailed(job.reason, job=job)

            job.content_length = self._parse_content_length(
                job, response.headers.get(HEADER_CONTENT_LENGTH)
            )
            if job.content_length:
                logger.info(f"{LOG_PROCESS} File size: {job.content_length} bytes")

            stream_handler = StreamHandler(
                progress_callback=progress_callback,
                log_interval=self.log_interval
            )
            try:
                await stream_handler.stream_to_file(
                    response_stream=response.content.iter_chunked(self.chunk_size),
                    output_path=job.destination,
                    total_size=job.content_length
                )
            finally:
                job.bytes_written = stream_handler.bytes_written

        if job.content_length is not None and job.bytes_written != job.content_length:
            job.reason = (
                f"Truncated transfer: {job.bytes_written} of {job.content_length} bytes"
            )
            raise DownloadFailed(job.reason, job=job)

    @staticmethod
    def _parse_content_length(job: DownloadJob, header: Optional[str]) -> Optional[int]:
        """Declared body size, or None when the header is absent."""
        if not header:
            return None
        try:
            length = int(header)
        except ValueError:
            length = -1
        if length < 0:
            job.reason = f"Malformed Content-Length header: {header!r}"
            raise DownloadFailed(job.reason, job=job)
        return length

    def _fail(self, job: DownloadJob, reason: str, start_time: float) -> None:
        job.state = DownloadState.FAILED
        job.reason = reason
        job.duration = time.time() - start_time
        self._remove_partial(job.destination)
        logger.error(f"{LOG_OUTPUT} Download failed: {reason}")

    @staticmethod
    def _remove_partial(destination: Path) -> None:
        try:
            destination.unlink()
            logger.info(f"{LOG_PROCESS} Removed partial file: {destination.name}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Cannot remove partial file {destination}: {e}")

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session. Transfer encodings are never decoded."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(auto_decompress=False)
            self._owns_session = True
        return self._session

    async def close(self):
        """Close HTTP session if this handler created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()


__all__ = ['HTTPHandler']
