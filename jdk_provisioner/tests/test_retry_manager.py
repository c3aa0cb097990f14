# Path: jdk_provisioner/tests/test_retry_manager.py
"""Tests for RetryManager."""

import asyncio

import pytest

from jdk_provisioner.core.errors import (
    CatalogUnreachable,
    ChecksumMismatch,
    DownloadTimedOut,
    VersionNotOffered,
)
from jdk_provisioner.engine.retry_manager import RetryManager, is_retryable_error


class Flaky:
    """Raises the given errors in order, then returns 'ok'."""

    def __init__(self, *errors):
        self.errors = list(errors)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return 'ok'


def manager(max_retries=3):
    sleeps = []

    async def record_sleep(seconds):
        sleeps.append(seconds)

    return RetryManager(max_retries=max_retries, base_delay=1.0, max_delay=5.0, sleep=record_sleep), sleeps


def test_calculate_delay_is_capped():
    retry = RetryManager(max_retries=5, base_delay=1.0, max_delay=5.0)
    assert [retry.calculate_delay(n) for n in range(5)] == [1.0, 2.0, 4.0, 5.0, 5.0]


def test_only_transient_errors_are_retryable():
    assert is_retryable_error(CatalogUnreachable("down"))
    assert is_retryable_error(DownloadTimedOut("slow"))
    assert not is_retryable_error(ChecksumMismatch("bad"))
    assert not is_retryable_error(VersionNotOffered("nope"))
    assert not is_retryable_error(RuntimeError("other"))


def test_retries_transient_then_succeeds():
    retry, sleeps = manager()
    func = Flaky(CatalogUnreachable("down"), DownloadTimedOut("slow"))

    assert asyncio.run(retry.retry_async(func)) == 'ok'
    assert func.calls == 3
    assert sleeps == [1.0, 2.0]


def test_gives_up_after_max_retries():
    retry, sleeps = manager(max_retries=2)
    func = Flaky(*[CatalogUnreachable(f"down {n}") for n in range(5)])

    with pytest.raises(CatalogUnreachable) as excinfo:
        asyncio.run(retry.retry_async(func))

    assert func.calls == 3
    assert excinfo.value.reason == "down 2"
    assert len(sleeps) == 2


def test_permanent_error_is_raised_immediately():
    retry, sleeps = manager()
    func = Flaky(ChecksumMismatch("tampered"))

    with pytest.raises(ChecksumMismatch):
        asyncio.run(retry.retry_async(func))

    assert func.calls == 1
    assert sleeps == []


def test_defaults_come_from_config(config):
    retry = RetryManager(config=config)
    assert retry.max_retries == 2
    assert retry.base_delay == 0.0
