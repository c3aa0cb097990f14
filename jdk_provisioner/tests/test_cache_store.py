# Path: jdk_provisioner/tests/test_cache_store.py
"""
Tests for CacheStore.

Tests:
- Deterministic artifact naming
- Presence checks and unavailable roots
- Commit by rename, first commit wins
- Staging names, discard and stale sweep
"""

import os
import time

import pytest

from jdk_provisioner.core.errors import IOUnavailable, InvalidJavaVersion
from jdk_provisioner.engine.cache_store import CacheStore


def test_path_for_is_deterministic(store):
    assert store.path_for(21) == store.root / 'jdk-21.tar.gz'
    assert store.path_for('17') == store.root / 'jdk-17.tar.gz'


def test_path_for_rejects_invalid_versions(store):
    with pytest.raises(InvalidJavaVersion):
        store.path_for(0)


def test_exists_only_for_regular_files(store):
    assert not store.exists(21)

    (store.root / 'jdk-21.tar.gz').mkdir()
    assert not store.exists(21)

    (store.root / 'jdk-17.tar.gz').write_bytes(b'x')
    assert store.exists(17)


def test_exists_on_missing_root_raises(tmp_path, config):
    store = CacheStore(tmp_path / 'missing', config)

    with pytest.raises(IOUnavailable):
        store.exists(21)


def test_exists_when_root_is_a_file_raises(tmp_path, config):
    not_a_dir = tmp_path / 'cache-file'
    not_a_dir.write_text('oops')

    with pytest.raises(IOUnavailable):
        CacheStore(not_a_dir, config).exists(21)


def test_staging_paths_are_unique_and_inside_root(store):
    first = store.staging_path(21)
    second = store.staging_path(21)

    assert first != second
    assert first.parent == store.root
    assert first.name.startswith('.staging-jdk-21.tar.gz-')
    assert first.name.endswith('.part')
    assert store.staging_path(21, run_id='abc').name == '.staging-jdk-21.tar.gz-abc.part'


def test_commit_renames_staging_into_place(store):
    staging = store.staging_path(21)
    staging.write_bytes(b'verified bytes')

    entry = store.commit(staging, 21)

    assert entry.path == store.root / 'jdk-21.tar.gz'
    assert entry.path.read_bytes() == b'verified bytes'
    assert not staging.exists()
    assert store.exists(21)


def test_commit_keeps_first_artifact(store):
    (store.root / 'jdk-21.tar.gz').write_bytes(b'winner')
    staging = store.staging_path(21)
    staging.write_bytes(b'loser')

    entry = store.commit(staging, 21)

    assert entry.path.read_bytes() == b'winner'
    assert not staging.exists()


def test_commit_from_outside_root(store, tmp_path):
    outside = tmp_path / 'elsewhere.part'
    outside.write_bytes(b'payload')

    entry = store.commit(outside, 11)

    assert entry.path.read_bytes() == b'payload'
    assert not outside.exists()
    assert [p.name for p in store.root.iterdir()] == ['jdk-11.tar.gz']


def test_commit_missing_staging_raises(store):
    with pytest.raises(IOUnavailable):
        store.commit(store.staging_path(21), 21)
    assert not store.exists(21)


def test_discard(store):
    staging = store.staging_path(8)
    staging.write_bytes(b'partial')

    assert store.discard(staging)
    assert not staging.exists()
    assert not store.discard(staging)
    assert not store.discard(None)


def test_list_entries_ignores_staging_and_strays(store):
    for name in ('jdk-21.tar.gz', 'jdk-8.tar.gz', 'jdk-x.tar.gz', 'notes.txt'):
        (store.root / name).write_bytes(b'x')
    store.staging_path(17).write_bytes(b'partial')

    assert [entry.version for entry in store.list_entries()] == [8, 21]


def test_sweep_staging_removes_only_stale_files(store):
    stale = store.staging_path(21)
    fresh = store.staging_path(21)
    stale.write_bytes(b'old')
    fresh.write_bytes(b'new')
    old = time.time() - 7200
    os.utime(stale, (old, old))

    removed = store.sweep_staging(max_age_seconds=3600)

    assert removed == [stale]
    assert fresh.exists()


def test_lock_file_lives_in_root(store):
    lock = store.lock(21, timeout=1)

    with lock:
        assert lock.is_locked
        assert (store.root / '.jdk-21.lock').exists()
    assert not lock.is_locked
