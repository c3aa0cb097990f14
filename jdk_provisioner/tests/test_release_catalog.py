# Path: jdk_provisioner/tests/test_release_catalog.py
"""
Tests for ReleaseCatalog and the registry document parsers.

Tests:
- available_releases in both accepted shapes
- assets parsing (binaries array and single binary object)
- Unreachable and malformed registry responses
- VersionNotOffered and binary URL construction
"""

import asyncio
import json

import aiohttp
import pytest

from jdk_provisioner.core.errors import (
    CatalogMalformed,
    CatalogUnreachable,
    VersionNotOffered,
)
from jdk_provisioner.engine.release_catalog import (
    ReleaseCatalog,
    is_valid_checksum,
    parse_available_releases,
    parse_release_assets,
)
from jdk_provisioner.tests.fakes import ARCHIVE_SHA256, OTHER_SHA256, FakeResponse, FakeSession

API = 'https://registry.test/v3'
RELEASES_URL = f'{API}/info/available_releases'
ASSETS_21_URL = f'{API}/assets/latest/21/hotspot'


def binary(checksum, os_name='linux', arch='x64', image_type='jdk'):
    return {
        'os': os_name,
        'architecture': arch,
        'image_type': image_type,
        'package': {
            'checksum': checksum,
            'link': f'https://example.test/{os_name}-{arch}.tar.gz',
        },
    }


def json_response(payload, status=200):
    return FakeResponse(status=status, body=json.dumps(payload).encode())


def make_catalog(config, routes):
    session = FakeSession(routes)
    return ReleaseCatalog(config, session=session), session


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------

def test_parse_available_releases_array():
    assert parse_available_releases([8, 11, 17, 21]) == frozenset({8, 11, 17, 21})


def test_parse_available_releases_object():
    payload = {'available_releases': [8, 21], 'most_recent_lts': 21}
    assert parse_available_releases(payload) == frozenset({8, 21})


@pytest.mark.parametrize('payload', [
    {'releases': [8]},
    'not a list',
    [8, '11'],
    [8, None],
    [True],
    None,
])
def test_parse_available_releases_rejects_bad_shapes(payload):
    with pytest.raises(CatalogMalformed):
        parse_available_releases(payload)


def test_parse_release_assets_collects_all_platform_checksums():
    payload = [
        {'binaries': [binary(ARCHIVE_SHA256), binary(OTHER_SHA256.upper(), arch='aarch64')]},
    ]

    info = parse_release_assets(21, payload)

    assert info.checksums == frozenset({ARCHIVE_SHA256, OTHER_SHA256})
    assert info.for_platform('linux', 'aarch64', 'jdk').checksum == OTHER_SHA256
    assert info.for_platform('windows', 'x64', 'jdk') is None


def test_parse_release_assets_single_binary_object():
    info = parse_release_assets(21, [{'binary': binary(ARCHIVE_SHA256)}])
    assert info.checksums == frozenset({ARCHIVE_SHA256})


@pytest.mark.parametrize('payload', [
    {'binaries': []},
    [],
    [{'binaries': []}],
    [{'version': 21}],
    ['release'],
    [{'binaries': [{'package': {}}]}],
    [{'binaries': [{'package': {'checksum': 'abc'}}]}],
    [{'binaries': [{'os': 'linux'}]}],
])
def test_parse_release_assets_rejects_bad_shapes(payload):
    with pytest.raises(CatalogMalformed):
        parse_release_assets(21, payload)


def test_is_valid_checksum():
    assert is_valid_checksum(ARCHIVE_SHA256)
    assert is_valid_checksum(ARCHIVE_SHA256.upper())
    assert not is_valid_checksum(ARCHIVE_SHA256[:-1])
    assert not is_valid_checksum('z' * 64)
    assert not is_valid_checksum(None)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

def test_available_versions_queries_every_time(config):
    catalog, session = make_catalog(config, {
        RELEASES_URL: json_response({'available_releases': [8, 11, 17, 21], 'most_recent_lts': 21}),
    })

    async def query_twice():
        return await catalog.available_versions(), await catalog.available_versions()

    first, second = asyncio.run(query_twice())

    assert first == second == frozenset({8, 11, 17, 21})
    assert session.requests == [RELEASES_URL, RELEASES_URL]


def test_most_recent_lts(config):
    catalog, _ = make_catalog(config, {
        RELEASES_URL: json_response({'available_releases': [21, 22], 'most_recent_lts': 21}),
    })
    assert asyncio.run(catalog.most_recent_lts()) == 21


def test_most_recent_lts_missing_is_malformed(config):
    catalog, _ = make_catalog(config, {RELEASES_URL: json_response([8, 11])})
    with pytest.raises(CatalogMalformed):
        asyncio.run(catalog.most_recent_lts())


def test_http_error_status_is_unreachable(config):
    catalog, _ = make_catalog(config, {RELEASES_URL: FakeResponse(status=503)})
    with pytest.raises(CatalogUnreachable) as excinfo:
        asyncio.run(catalog.available_versions())
    assert '503' in excinfo.value.reason


def test_connection_error_is_unreachable(config):
    catalog, _ = make_catalog(config, {RELEASES_URL: aiohttp.ClientConnectionError('refused')})
    with pytest.raises(CatalogUnreachable):
        asyncio.run(catalog.available_versions())


def test_timeout_is_unreachable(config):
    catalog, _ = make_catalog(config, {RELEASES_URL: asyncio.TimeoutError()})
    with pytest.raises(CatalogUnreachable):
        asyncio.run(catalog.available_versions())


def test_invalid_json_is_malformed(config):
    catalog, _ = make_catalog(config, {RELEASES_URL: FakeResponse(body=b'<html>oops</html>')})
    with pytest.raises(CatalogMalformed):
        asyncio.run(catalog.available_versions())


def test_checksums_for(config):
    catalog, session = make_catalog(config, {
        ASSETS_21_URL: json_response([{'binaries': [binary(ARCHIVE_SHA256)]}]),
    })

    assert asyncio.run(catalog.checksums_for(21)) == frozenset({ARCHIVE_SHA256})
    assert session.requests == [ASSETS_21_URL]


def test_checksums_for_empty_is_malformed(config):
    catalog, _ = make_catalog(config, {ASSETS_21_URL: json_response([])})
    with pytest.raises(CatalogMalformed) as excinfo:
        asyncio.run(catalog.checksums_for(21))
    assert excinfo.value.version == 21


def test_release_info_for_unoffered_version(config):
    catalog, session = make_catalog(config, {RELEASES_URL: json_response([8, 11])})

    with pytest.raises(VersionNotOffered):
        asyncio.run(catalog.release_info(21))

    assert session.requests == [RELEASES_URL]


def test_release_info(config):
    catalog, _ = make_catalog(config, {
        RELEASES_URL: json_response([17, 21]),
        ASSETS_21_URL: json_response([{'binaries': [binary(ARCHIVE_SHA256)]}]),
    })

    info = asyncio.run(catalog.release_info(21))

    assert info.version == 21
    assert info.binaries[0].url == 'https://example.test/linux-x64.tar.gz'


def test_binary_url_uses_configured_platform(config):
    catalog, _ = make_catalog(config, {})
    assert catalog.binary_url(21) == (
        f'{API}/binary/latest/21/ga/linux/x64/jdk/hotspot/normal/eclipse'
    )


def test_close_leaves_injected_session_open(config):
    catalog, session = make_catalog(config, {})
    asyncio.run(catalog.close())
    assert not session.closed
