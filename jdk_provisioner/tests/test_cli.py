# Path: jdk_provisioner/tests/test_cli.py
"""
Tests for the provision CLI.

Exit status contract: 0 success, 1 provisioning failure, 2 invalid
arguments.
"""

import asyncio

import pytest

from jdk_provisioner.cli.provision_cli import ProvisionCLI, build_parser, main
from jdk_provisioner.engine.extraction import Extractor
from jdk_provisioner.tests.fakes import (
    ARCHIVE_BYTES,
    OTHER_SHA256,
    FakeCatalog,
    FakeDownloader,
    FakeRunner,
)


def run_cli(config, argv, catalog=None, downloader=None):
    cli = ProvisionCLI(
        config,
        catalog=catalog or FakeCatalog(),
        downloader=downloader or FakeDownloader(),
        extractor=Extractor(runner=FakeRunner()),
    )
    return asyncio.run(cli.run(build_parser().parse_args(argv)))


def test_parser_defaults():
    args = build_parser().parse_args(['ensure', '21'])
    assert args.version == '21'
    assert args.retry is True
    assert args.extract_to is None

    assert build_parser().parse_args(['ensure', '21', '--no-retry']).retry is False


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert 'usage' in capsys.readouterr().out.lower()


def test_missing_argument_is_usage_error():
    with pytest.raises(SystemExit) as excinfo:
        main(['ensure'])
    assert excinfo.value.code == 2


def test_invalid_version_is_usage_error(config):
    assert run_cli(config, ['ensure', 'twenty-one']) == 2
    assert run_cli(config, ['ensure', '0']) == 2


def test_ensure_downloads_and_commits(config, cache_root):
    downloader = FakeDownloader()

    assert run_cli(config, ['ensure', '21'], downloader=downloader) == 0
    assert (cache_root / 'jdk-21.tar.gz').read_bytes() == ARCHIVE_BYTES
    assert downloader.calls == 1


def test_ensure_with_extraction(config, tmp_path):
    target = tmp_path / 'java'
    target.mkdir()

    assert run_cli(config, ['ensure', '17', '--extract-to', str(target)]) == 0


def test_ensure_unavailable_version_fails(config, capsys):
    downloader = FakeDownloader()

    assert run_cli(config, ['ensure', '999'], downloader=downloader) == 1
    assert downloader.calls == 0
    assert 'version_unavailable' in capsys.readouterr().out


def test_checksum_mismatch_is_not_retried(config):
    downloader = FakeDownloader()
    catalog = FakeCatalog(checksums={OTHER_SHA256})

    assert run_cli(config, ['ensure', '21'], catalog=catalog, downloader=downloader) == 1
    assert downloader.calls == 1


def test_available(config, capsys):
    assert run_cli(config, ['available'], catalog=FakeCatalog(versions=(17, 21, 25), lts=21)) == 0
    output = capsys.readouterr().out
    assert '25' in output
    assert 'most recent LTS' in output


def test_list(config, cache_root, capsys):
    (cache_root / 'jdk-11.tar.gz').write_bytes(b'x' * 1024)

    assert run_cli(config, ['list']) == 0
    assert 'jdk-11.tar.gz' in capsys.readouterr().out


def test_verify(config, cache_root):
    assert run_cli(config, ['verify', '21']) == 1

    (cache_root / 'jdk-21.tar.gz').write_bytes(ARCHIVE_BYTES)
    assert run_cli(config, ['verify', '21']) == 0
    assert run_cli(config, ['verify', '21'], catalog=FakeCatalog(checksums={OTHER_SHA256})) == 1


def test_check_layout(config, tmp_path):
    project = tmp_path / 'project'
    project.mkdir()
    assert run_cli(config, ['check-layout', str(project)]) == 1

    for name in ('server', 'cache', 'log', 'java'):
        (project / name).mkdir()
    (project / 'config.toml').write_text('')
    assert run_cli(config, ['check-layout', str(project)]) == 0
