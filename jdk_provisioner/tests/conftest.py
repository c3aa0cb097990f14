# Path: jdk_provisioner/tests/conftest.py
"""Shared fixtures: isolated configuration and a cache root per test."""

import pytest

from jdk_provisioner.core.config_loader import ConfigLoader
from jdk_provisioner.engine.cache_store import CacheStore


@pytest.fixture
def cache_root(tmp_path):
    root = tmp_path / 'cache'
    root.mkdir()
    return root


@pytest.fixture
def config(cache_root):
    return ConfigLoader(overrides={
        'cache_root': cache_root,
        'api_base_url': 'https://registry.test/v3',
        'platform_os': 'linux',
        'platform_arch': 'x64',
        'image_type': 'jdk',
        'download_timeout': 5.0,
        'lock_timeout': 10.0,
        'retry_attempts': 2,
        'retry_delay': 0.0,
        'max_retry_delay': 0.0,
        'log_dir': None,
    })


@pytest.fixture
def store(cache_root, config):
    return CacheStore(cache_root, config)
