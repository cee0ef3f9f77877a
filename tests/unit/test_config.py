import pytest
import yaml

from blobcache_lib.config.config import CacheConfig, default_config_yaml, load_config


def test_defaults_without_file_or_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cfg = load_config(environ={})
    assert cfg.connection_string is None
    assert cfg.container_name == 'github-actions-cache'
    assert cfg.compression_method == 'gzip'
    assert cfg.timeout == 600


def test_yaml_file_and_env_overrides(tmp_path):
    path = tmp_path / 'cfg.yml'
    path.write_text(yaml.safe_dump({'container_name': 'from-file', 'compression_method': 'none', 'timeout': 12}))
    env = {
        'AZURE_STORAGE_CONNECTION_STRING': 'azure-conn',
        'BLOBCACHE_CONTAINER': 'from-env',
        'GITHUB_WORKSPACE': '/work',
        'RUNNER_TEMP': '/runner/tmp',
    }
    cfg = load_config(path, environ=env)
    assert cfg.connection_string == 'azure-conn'
    assert cfg.container_name == 'from-env'
    assert cfg.compression_method == 'none'
    assert cfg.timeout == 12
    assert cfg.workspace_root == '/work'
    assert cfg.temp_dir == '/runner/tmp'


def test_blobcache_connection_string_takes_precedence(tmp_path):
    env = {'AZURE_STORAGE_CONNECTION_STRING': 'generic', 'BLOBCACHE_CONNECTION_STRING': 'specific'}
    assert load_config(environ=env).connection_string == 'specific'


def test_connection_string_not_in_repr():
    assert 'secret' not in repr(CacheConfig(connection_string='secret'))


def test_invalid_values_are_rejected(tmp_path):
    with pytest.raises(ValueError):
        load_config(environ={'BLOBCACHE_COMPRESSION': 'lzma'})
    bad = tmp_path / 'bad.yml'
    bad.write_text('- just\n- a list\n')
    with pytest.raises(ValueError):
        load_config(bad, environ={})
    broken = tmp_path / 'broken.yml'
    broken.write_text('key: [unclosed\n')
    with pytest.raises(ValueError):
        load_config(broken, environ={})


def test_explicit_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / 'nope.yml', environ={})


def test_template_round_trips():
    data = yaml.safe_load(default_config_yaml())
    assert data['container_name'] == 'github-actions-cache'
    assert CacheConfig(**data) == CacheConfig()
