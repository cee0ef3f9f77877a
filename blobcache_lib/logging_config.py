from __future__ import annotations
import logging
from pathlib import Path
import yaml
from typing import Optional

DEFAULT_LOG_LEVEL = logging.INFO


def _level_from_config(config_path: Path) -> Optional[int]:
    try:
        with config_path.open('r', encoding='utf-8') as _f:
            _cfg = yaml.safe_load(_f) or {}
    except (OSError, yaml.YAMLError):
        return None
    _lvl = _cfg.get('log_level') if isinstance(_cfg, dict) else None
    if isinstance(_lvl, str):
        _numeric = getattr(logging, _lvl.upper(), None)
        if isinstance(_numeric, int):
            return _numeric
    return None


def configure_logging(level: Optional[str] = None, config_path: Optional[Path] = None) -> logging.Logger:
    """Configure root logging for the cache command.

    An explicit `level` wins; otherwise `log_level` is read from the YAML
    config file if one exists, falling back to INFO. Returns a module
    logger for the caller.
    """
    # Minimal early config so other imports can emit without error
    logging.basicConfig(level=logging.NOTSET, format='%(asctime)s INFO %(message)s')
    log_level = DEFAULT_LOG_LEVEL

    cfg_path = config_path or Path('blobcache.yml')
    if level:
        _numeric = getattr(logging, level.upper(), None)
        if isinstance(_numeric, int):
            log_level = _numeric
    elif cfg_path.exists():
        log_level = _level_from_config(cfg_path) or DEFAULT_LOG_LEVEL

    # Reconfigure root handlers to use the selected level and format
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=log_level, format='%(asctime)s %(levelname)s [%(name)s]: %(message)s')
    logger = logging.getLogger(__name__)

    # Keep known noisy libraries quiet by default
    logging.getLogger('azure').setLevel(logging.WARNING)
    logging.getLogger('azure.core.pipeline.policies.http_logging_policy').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logger.debug("Log level set to: %s", logging.getLevelName(log_level))

    return logger
