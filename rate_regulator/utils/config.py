import json
import logging
import os
from functools import lru_cache
from typing import Dict, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    ValidationError,
    field_validator,
)

from rate_regulator.relative_time import resolve_relative_time
from rate_regulator.types import system_clock


logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "amount": 1000.0,
    "period": "+1 hour",
    "count": 0.0,
    "log_level": "INFO",
    "json_logs": False,
}

ENV_OVERRIDES = {
    "RATE_REGULATOR_AMOUNT": "amount",
    "RATE_REGULATOR_PERIOD": "period",
    "RATE_REGULATOR_COUNT": "count",
}


def _deep_update(base: Dict, override: Dict) -> Dict:
    """Recursively merge ``override`` into ``base``."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_update(base[key], value)
        else:
            base[key] = value
    return base


def load_config(config_dir: Optional[str] = None) -> Dict:
    """Load configuration with optional local overrides.

    Parameters
    ----------
    config_dir:
        Directory to load config files from. Defaults to the repository root.

    Returns
    -------
    dict
        Merged and validated configuration dictionary.
    """
    base_dir = config_dir or os.path.dirname(
        os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    )
    config_path = os.path.join(base_dir, "config.json")
    try:
        with open(config_path, "r") as f:
            config = json.load(f)
    except FileNotFoundError:
        logger.warning(
            "load_config: config.json not found at %s, using default values",
            config_path,
        )
        config = dict(DEFAULT_CONFIG)

    local_path = os.path.join(base_dir, "config.local.json")
    if os.path.exists(local_path):
        try:
            with open(local_path, "r") as f:
                local_cfg = json.load(f)
            config = _deep_update(config, local_cfg)
        except (OSError, json.JSONDecodeError) as e:  # noqa: BLE001
            logger.warning(
                "load_config: Failed loading config.local.json at %s: %s",
                local_path,
                e,
            )

    for env_name, key in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            config[key] = value

    try:
        validated = ConfigModel(**config)
    except ValidationError as e:  # noqa: BLE001
        raise ValueError(f"Invalid configuration: {e}") from e
    return validated.model_dump()


class ConfigModel(BaseModel):
    amount: float
    period: str
    count: float = 0.0
    log_level: str = "INFO"
    json_logs: bool = False

    model_config = ConfigDict(extra="allow")

    @field_validator("period")
    @classmethod
    def period_parses(cls, v: str) -> str:
        resolve_relative_time(v, system_clock())
        return v

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache(maxsize=1)
def get_config(config_dir: Optional[str] = None) -> Dict:
    """Return the merged configuration, caching the result."""
    return load_config(config_dir)
