# Path: jdk_provisioner/tests/fakes.py
"""
Test doubles for network and subprocess boundaries.

FakeCatalog and FakeDownloader stand in for ReleaseCatalog and HTTPHandler
and count their calls. FakeSession mimics the small part of
aiohttp.ClientSession the engine uses.
"""

import asyncio
import hashlib
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from jdk_provisioner.core.errors import CatalogMalformed
from jdk_provisioner.engine.result import DownloadJob, DownloadState

ARCHIVE_BYTES = b'not really a jdk archive\n' * 4096
ARCHIVE_SHA256 = hashlib.sha256(ARCHIVE_BYTES).hexdigest()
OTHER_SHA256 = hashlib.sha256(b'some other platform').hexdigest()


class FakeCatalog:
    """In-memory release registry."""

    def __init__(
        self,
        versions=(8, 11, 17, 21),
        checksums=None,
        lts: Optional[int] = 21,
        error: Optional[Exception] = None
    ):
        self.versions = frozenset(versions)
        self.checksums = frozenset(checksums) if checksums is not None else frozenset({ARCHIVE_SHA256})
        self.lts = lts
        self.error = error
        self.available_calls = 0
        self.checksum_calls = 0
        self.closed = False

    @property
    def calls(self) -> int:
        return self.available_calls + self.checksum_calls

    async def available_versions(self):
        self.available_calls += 1
        await asyncio.sleep(0)
        if self.error:
            raise self.error
        return self.versions

    async def checksums_for(self, version):
        self.checksum_calls += 1
        await asyncio.sleep(0)
        return self.checksums

    async def most_recent_lts(self):
        if self.lts is None:
            raise CatalogMalformed("no lts")
        return self.lts

    def binary_url(self, version):
        return f'https://registry.test/binary/{version}'

    async def close(self):
        self.closed = True


class FakeDownloader:
    """
    Writes a fixed payload to the destination.

    When ``error`` is set, calls raise it after writing half the payload,
    leaving a partial file behind. ``failures`` limits this to the first N
    calls.
    """

    def __init__(
        self,
        payload: bytes = ARCHIVE_BYTES,
        error: Optional[Exception] = None,
        failures: Optional[int] = None,
        delay: float = 0.0
    ):
        self.payload = payload
        self.error = error
        self.failures = failures
        self.delay = delay
        self.calls = 0
        self.destinations: list[Path] = []

    async def fetch(self, url, destination, progress_callback=None):
        self.calls += 1
        destination = Path(destination)
        self.destinations.append(destination)
        await asyncio.sleep(self.delay)

        if self.error is not None and (self.failures is None or self.calls <= self.failures):
            destination.write_bytes(self.payload[:len(self.payload) // 2])
            raise self.error

        destination.write_bytes(self.payload)
        if progress_callback:
            progress_callback(len(self.payload), len(self.payload))
        return DownloadJob(
            url=url,
            destination=destination,
            bytes_written=len(self.payload),
            state=DownloadState.SUCCEEDED,
            status_code=200,
            content_length=len(self.payload),
        )

    async def close(self):
        pass


@dataclass
class FakeRunner:
    """Records commands instead of running them."""
    returncode: int = 0
    stderr: str = ''
    commands: list = field(default_factory=list)

    def __call__(self, args):
        self.commands.append(list(args))
        return subprocess.CompletedProcess(args, self.returncode, stdout='', stderr=self.stderr)


class FakeContent:
    def __init__(self, chunks, delay: float = 0.0):
        self.chunks = chunks
        self.delay = delay

    async def _iterate(self):
        for chunk in self.chunks:
            await asyncio.sleep(self.delay)
            yield chunk

    def iter_chunked(self, size):
        return self._iterate()


class FakeResponse:
    def __init__(
        self,
        status: int = 200,
        body: bytes = b'',
        chunks=None,
        headers: Optional[dict] = None,
        delay: float = 0.0
    ):
        self.status = status
        self.body = body
        self.headers = headers if headers is not None else {}
        self.content = FakeContent(chunks if chunks is not None else [body], delay)

    async def read(self):
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class FakeSession:
    """Routes GET requests by URL to canned responses or exceptions."""

    def __init__(self, routes: dict[str, Union[FakeResponse, Exception]]):
        self.routes = routes
        self.requests: list[str] = []
        self.closed = False

    def get(self, url, **kwargs):
        self.requests.append(url)
        route = self.routes[url]
        if isinstance(route, Exception):
            raise route
        return route

    async def close(self):
        self.closed = True
