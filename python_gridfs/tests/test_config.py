import pytest

from common.config import AppConfig, load_settings
from errors import ConfigError
from store import MemoryChunkStore, RedisChunkStore, create_store


def test_load_settings_from_toml(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        'node_id = "node-9"\n'
        "[redis]\n"
        'host = "cache.local"\n'
        "port = 6380\n"
        'password = "secret"\n'
        "[store]\n"
        'backend = "memory"\n'
        'database = "media"\n'
        'root = "images"\n'
        "chunk_size = 1024\n"
        "[logger]\n"
        'level = "debug"\n'
        'format = "JSON"\n'
    )

    settings = load_settings(path)

    assert settings.node_id == "node-9"
    assert settings.redis.url == "redis://:secret@cache.local:6380/0"
    assert settings.store.backend == "memory"
    assert settings.store.database == "media"
    assert settings.store.root == "images"
    assert settings.store.chunk_size == 1024
    assert settings.logging.level == "DEBUG"
    assert settings.logging.format == "json"


def test_invalid_toml_raises_config_error(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[store\nbackend = ")

    with pytest.raises(ConfigError):
        load_settings(path)


def test_invalid_values_raise_config_error(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[store]\nchunk_size = 0\n")

    with pytest.raises(ConfigError):
        load_settings(path)


def test_nested_env_override(monkeypatch):
    monkeypatch.setenv("STORE__BACKEND", "memory")
    monkeypatch.setenv("REDIS__TLS", "true")

    settings = AppConfig()

    assert settings.store.backend == "memory"
    assert settings.redis.url.startswith("rediss://")


def test_create_store_by_backend_name():
    settings = AppConfig()

    settings.store.backend = "memory"
    assert isinstance(create_store(settings), MemoryChunkStore)

    settings.store.backend = "Redis"
    store = create_store(settings)
    assert isinstance(store, RedisChunkStore)
    assert store.redis_url == settings.redis.url

    settings.store.backend = "mongo"
    with pytest.raises(ConfigError):
        create_store(settings)
