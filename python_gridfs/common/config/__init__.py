from .models import AppConfig, RedisConfig, StoreConfig, LoggingConfig
from pathlib import Path
from typing import Optional
import tomllib
from pydantic import ValidationError

from errors import ConfigError

def _deep_update(base: dict, updates: dict) -> dict:
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _deep_update(base[key], value)
        else:
            base[key] = value
    return base


def _map_toml_config(data: dict) -> dict:
    mapped: dict = {}

    if "node_id" in data:
        mapped["node_id"] = data["node_id"]

    redis_cfg = data.get("redis", {})
    if redis_cfg:
        mapped.setdefault("redis", {})
        for key in ["host", "port", "db", "username", "password", "pool_size", "tls"]:
            if key in redis_cfg:
                mapped["redis"][key] = redis_cfg[key]

    store_cfg = data.get("store", {})
    if store_cfg:
        mapped.setdefault("store", {})
        for key in ["backend", "database", "root", "chunk_size"]:
            if key in store_cfg:
                mapped["store"][key] = store_cfg[key]

    logger_cfg = data.get("logger", {})
    if logger_cfg:
        mapped.setdefault("logging", {})
        if "level" in logger_cfg:
            mapped["logging"]["level"] = logger_cfg["level"].upper()
        if "format" in logger_cfg:
            mapped["logging"]["format"] = logger_cfg["format"].lower()

    return mapped


def load_settings(config_path: Optional[Path] = None) -> AppConfig:
    """Env/.env settings, overlaid with config.toml when one is found"""
    if config_path is None:
        candidates = [
            Path.cwd() / "config.toml",
            Path(__file__).resolve().parents[2] / "config.toml",
        ]
        config_path = next((p for p in candidates if p.exists()), None)
    if not config_path:
        return AppConfig()

    try:
        with open(config_path, "rb") as f:
            raw = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Cannot read {config_path}", e)

    base = AppConfig().model_dump()
    merged = _deep_update(base, _map_toml_config(raw))
    try:
        return AppConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}", e)


settings = load_settings()

def get_settings() -> AppConfig:
    return settings

def update_settings(new_settings: AppConfig):
    global settings
    settings = new_settings
