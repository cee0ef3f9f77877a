import shutil
import sys

import pytest

from blobcache_lib.archive.codec import (
    ArchiveCodec,
    detect_compression_method,
    find_tar,
    get_archive_extension,
)
from blobcache_lib.errors import ArchiveError, ToolNotFoundError
from blobcache_lib.providers.interfaces import SAVE_SKIPPED
from blobcache_lib.providers.remote import RemoteCacheProvider
from blobcache_lib.storage.memory_backend import MemoryBlobStore

def make_tree(root):
    (root / 'build' / 'sub').mkdir(parents=True)
    (root / 'build' / 'a.txt').write_text('alpha')
    (root / 'build' / 'sub' / 'b.bin').write_bytes(bytes(range(256)))
    (root / 'single.txt').write_text('single')
    (root / 'untouched.txt').write_text('not cached')


def test_extensions_and_detection():
    assert get_archive_extension('gzip') == '.tar.gz'
    assert get_archive_extension('zstd') == '.tar.zst'
    assert get_archive_extension('none') == '.tar'
    assert detect_compression_method('x/cache.tar.gz') == 'gzip'
    assert detect_compression_method('cache.tgz') == 'gzip'
    assert detect_compression_method('cache.tar.zst') == 'zstd'
    assert detect_compression_method('cache.tar') == 'none'
    with pytest.raises(ValueError):
        get_archive_extension('lzma')


def test_find_tar_prefers_gnu_tar_on_macos():
    found = {'gtar': '/opt/bin/gtar', 'tar': '/usr/bin/tar'}
    assert find_tar('darwin', which=found.get) == '/opt/bin/gtar'
    assert find_tar('darwin', which={'tar': '/usr/bin/tar'}.get) == '/usr/bin/tar'
    assert find_tar('linux', which=found.get) == '/usr/bin/tar'


def test_find_tar_missing_raises():
    with pytest.raises(ToolNotFoundError):
        find_tar('linux', which=lambda name: None)


def test_relative_paths(tmp_path):
    root = tmp_path.resolve()
    codec = ArchiveCodec(root)
    rel = codec.relative_paths(['build/', str(root / 'single.txt'), 'build/../single.txt'])
    assert rel == ['build', 'single.txt', 'single.txt']


def test_workspace_root_defaults_to_github_workspace(tmp_path, monkeypatch):
    monkeypatch.setenv('GITHUB_WORKSPACE', str(tmp_path))
    assert ArchiveCodec().workspace_root == tmp_path.resolve()


@pytest.mark.requires_tar
@pytest.mark.parametrize('method', ['gzip', 'none'])
def test_round_trip_restores_contents(tmp_path, method):
    workspace = tmp_path.resolve() / 'ws'
    out_dir = tmp_path / 'out'
    workspace.mkdir()
    out_dir.mkdir()
    make_tree(workspace)
    codec = ArchiveCodec(workspace, timeout=60)

    archive = codec.create(out_dir, ['build/', str(workspace / 'single.txt')], method)
    assert archive.name == f'cache{get_archive_extension(method)}'
    # manifest is removed once the archive exists
    assert sorted(p.name for p in out_dir.iterdir()) == [archive.name]

    shutil.rmtree(workspace / 'build')
    (workspace / 'single.txt').unlink()
    codec.extract(archive, method)

    assert (workspace / 'build' / 'a.txt').read_text() == 'alpha'
    assert (workspace / 'build' / 'sub' / 'b.bin').read_bytes() == bytes(range(256))
    assert (workspace / 'single.txt').read_text() == 'single'
    assert (workspace / 'untouched.txt').read_text() == 'not cached'


@pytest.mark.requires_tar
def test_missing_path_fails_and_cleans_manifest(tmp_path):
    workspace = tmp_path / 'ws'
    out_dir = tmp_path / 'out'
    workspace.mkdir()
    out_dir.mkdir()
    codec = ArchiveCodec(workspace)
    with pytest.raises(ArchiveError) as exc:
        codec.create(out_dir, ['does-not-exist'], 'gzip')
    assert exc.value.exit_code not in (None, 0)
    assert not (out_dir / 'manifest.txt').exists()


@pytest.mark.requires_tar
def test_extract_corrupt_archive_fails(tmp_path):
    archive = tmp_path / 'cache.tar.gz'
    archive.write_bytes(b'not an archive')
    with pytest.raises(ArchiveError):
        ArchiveCodec(tmp_path / 'ws').extract(archive, 'gzip')


def test_missing_tar_binary_raises_tool_not_found(tmp_path):
    codec = ArchiveCodec(tmp_path, tar_path=str(tmp_path / 'no-such-tar'))
    with pytest.raises(ToolNotFoundError):
        codec.extract(tmp_path / 'cache.tar', 'none')


@pytest.mark.requires_tar
def test_names_starting_with_dash_are_archived_as_files(tmp_path):
    workspace = tmp_path.resolve() / 'ws'
    out_dir = tmp_path / 'out'
    workspace.mkdir()
    out_dir.mkdir()
    (workspace / '-v').write_text('dash')
    (workspace / '--checkpoint-action=exec=touch pwned').write_text('not an option')
    codec = ArchiveCodec(workspace, timeout=60)

    archive = codec.create(out_dir, ['-v', '--checkpoint-action=exec=touch pwned'], 'none')
    (workspace / '-v').unlink()
    (workspace / '--checkpoint-action=exec=touch pwned').unlink()
    codec.extract(archive, 'none')

    assert (workspace / '-v').read_text() == 'dash'
    assert (workspace / '--checkpoint-action=exec=touch pwned').read_text() == 'not an option'
    assert not (workspace / 'pwned').exists()


def make_slow_tar(tmp_path):
    script = tmp_path / 'slow-tar'
    script.write_text('#!/bin/sh\nexec sleep 5\n')
    script.chmod(0o755)
    return str(script)


@pytest.mark.skipif(sys.platform == 'win32', reason='needs a POSIX shell script as tar')
def test_create_timeout_raises_without_exit_code(tmp_path):
    workspace = tmp_path / 'ws'
    out_dir = tmp_path / 'out'
    workspace.mkdir()
    out_dir.mkdir()
    codec = ArchiveCodec(workspace, timeout=0.5, tar_path=make_slow_tar(tmp_path))
    with pytest.raises(ArchiveError) as exc:
        codec.create(out_dir, ['build/'], 'gzip')
    assert exc.value.exit_code is None
    assert not (out_dir / 'manifest.txt').exists()


@pytest.mark.skipif(sys.platform == 'win32', reason='needs a POSIX shell script as tar')
def test_save_timeout_is_skipped_and_cleaned(tmp_path, caplog):
    workspace = tmp_path / 'ws'
    workspace.mkdir()
    codec = ArchiveCodec(workspace, timeout=0.5, tar_path=make_slow_tar(tmp_path))
    store = MemoryBlobStore()
    provider = RemoteCacheProvider(store, codec, temp_root=tmp_path / 'tmp')

    assert provider.save_cache(['build/'], 'linux-v1') == SAVE_SKIPPED
    assert store.exists('linux-v1') is False
    assert list((tmp_path / 'tmp').iterdir()) == []
    assert 'timed out' in caplog.text
