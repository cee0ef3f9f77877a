"""Cache configuration.

Settings come from an optional YAML file and are then overridden by
environment variables, which is how CI runners usually hand them over.
"""
from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "blobcache.yml"
DEFAULT_CONTAINER_NAME = "github-actions-cache"
DEFAULT_TIMEOUT = 600.0

# environment variable -> config field
ENV_OVERRIDES = {
    "BLOBCACHE_CONNECTION_STRING": "connection_string",
    "BLOBCACHE_CONTAINER": "container_name",
    "BLOBCACHE_COMPRESSION": "compression_method",
    "BLOBCACHE_TIMEOUT": "timeout",
    "BLOBCACHE_LOCAL_DIR": "local_cache_dir",
    "BLOBCACHE_LOG_LEVEL": "log_level",
}


class CacheConfig(BaseModel):
    connection_string: Optional[str] = Field(default=None, repr=False)
    container_name: str = DEFAULT_CONTAINER_NAME
    compression_method: Literal["gzip", "zstd", "none"] = "gzip"
    workspace_root: Optional[str] = None
    temp_dir: Optional[str] = None
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    upload_chunk_size: Optional[int] = Field(default=None, gt=0)
    local_cache_dir: str = ".blobcache"
    log_level: str = "INFO"


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"invalid config format in {path}: parse error") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"invalid config format in {path}: expected mapping")
    return data


def load_config(path: Optional[str | Path] = None, environ: Optional[Mapping[str, str]] = None) -> CacheConfig:
    """Build a `CacheConfig` from `path` (if any) and the environment.

    An explicit `path` must exist; the default `blobcache.yml` is read only
    when present.
    """
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    cfg_path = Path(path) if path else Path(DEFAULT_CONFIG_FILE)
    if path and not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    if cfg_path.exists():
        values.update(_read_yaml(cfg_path))
        logger.debug("Loaded config from %s", cfg_path)

    if not values.get("connection_string") and env.get("AZURE_STORAGE_CONNECTION_STRING"):
        values["connection_string"] = env["AZURE_STORAGE_CONNECTION_STRING"]
    for var, field in ENV_OVERRIDES.items():
        if env.get(var):
            values[field] = env[var]

    if not values.get("workspace_root") and env.get("GITHUB_WORKSPACE"):
        values["workspace_root"] = env["GITHUB_WORKSPACE"]
    if not values.get("temp_dir") and env.get("RUNNER_TEMP"):
        values["temp_dir"] = env["RUNNER_TEMP"]

    return CacheConfig(**values)


def default_config_yaml() -> str:
    """Return a YAML template with every setting at its default."""
    return yaml.safe_dump(CacheConfig().model_dump(), sort_keys=False)
