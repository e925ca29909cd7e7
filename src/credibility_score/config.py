"""Runtime settings and score configuration loading.

The active configuration comes from the JSON file named by SCORE_CONFIG_PATH,
or the built-in default when that variable is unset.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from .core.defaults import get_default_score_config
from .core.models import RawScoreConfig, ScoreConfig
from .core.parser import parse_score_config

logger = logging.getLogger(__name__)

DEFAULT_LOG_LEVEL = "INFO"


def get_config_path() -> Optional[Path]:
    """Path of the score configuration file, if one is configured."""
    raw = os.environ.get("SCORE_CONFIG_PATH", "")
    return Path(raw).expanduser() if raw else None


def get_log_level() -> str:
    return os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


def load_raw_config(path: Union[str, Path]) -> RawScoreConfig:
    """Read and shape-check a JSON score configuration file."""
    with open(path, encoding="utf-8") as f:
        return RawScoreConfig.model_validate(json.load(f))


def load_score_config(path: Union[str, Path, None] = None) -> ScoreConfig:
    """Load and parse the score configuration at ``path`` (or SCORE_CONFIG_PATH).

    Falls back to the built-in default when neither is set.
    """
    path = path or get_config_path()
    if path is None:
        logger.info("SCORE_CONFIG_PATH not set — using built-in default score configuration")
        return get_default_score_config()

    config = parse_score_config(load_raw_config(path))
    logger.info("Loaded score configuration from %s (%d elements)", path, len(config.catalog))
    return config


_score_config: Optional[ScoreConfig] = None


def get_score_config() -> ScoreConfig:
    global _score_config
    if _score_config is None:
        _score_config = load_score_config()
    return _score_config


def reset_score_config():
    """Forget the cached configuration so the next call reloads it."""
    global _score_config
    _score_config = None
