"""Concord configuration management.

Loads configuration from .concord/config.yaml with sensible defaults.
All settings can be overridden via environment variables (CONCORD_*).

Config locations (in priority order):
1. Explicit path passed to load_config()
2. .concord/config.yaml (project-local)
3. ~/.concord/config.yaml (user-global)
4. Built-in defaults

Example config.yaml:
    engine:
      evolution_threshold: 100
      routes:
        creative: aura
        security: kai
    dream:
      poll_interval: 30
      importance_threshold: 0.7
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from concord.core.errors import ConcordError, ErrorCode
from concord.types.config import DreamConfig, EngineConfig

logger = logging.getLogger(__name__)

_ENV_PREFIX = "CONCORD_"


@dataclass
class ConcordConfig:
    """Root configuration for Concord."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    """Consciousness engine, router and evolution settings."""

    dream: DreamConfig = field(default_factory=DreamConfig)
    """Idle-cycle processor settings."""

    debug: bool = False
    """Enable debug logging by default."""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# Global config instance (lazy-loaded, thread-safe)
_config: ConcordConfig | None = None
_config_lock = threading.Lock()

# Section name → dataclass, used for env override splitting and validation
_SECTIONS: dict[str, type] = {
    "engine": EngineConfig,
    "dream": DreamConfig,
}


def _deep_update(base: dict, updates: dict) -> dict:
    """Recursively update a dict with another dict."""
    for key, value in updates.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_update(base[key], value)
        else:
            base[key] = value
    return base


def _coerce(value: str) -> Any:
    """Coerce an environment string to bool, int or float where possible."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
        return int(value)
    try:
        return float(value)
    except ValueError:
        return value


def _apply_env_overrides(config_dict: dict, environ: dict[str, str] | None = None) -> dict:
    """Apply environment variable overrides.

    Environment variables follow pattern: CONCORD_SECTION_KEY, where KEY is
    a field name of the section (field names may contain underscores).

    Examples:
        CONCORD_DREAM_POLL_INTERVAL=5
        CONCORD_ENGINE_EVOLUTION_THRESHOLD=50
        CONCORD_DEBUG=true
    """
    env = os.environ if environ is None else environ

    for key, value in env.items():
        if not key.startswith(_ENV_PREFIX):
            continue

        path_str = key[len(_ENV_PREFIX):].lower()

        if path_str == "debug":
            config_dict["debug"] = _coerce(value)
            continue

        for section, section_type in _SECTIONS.items():
            if not path_str.startswith(section + "_"):
                continue
            remaining = path_str[len(section) + 1:]
            known = {f.name for f in fields(section_type)}
            if remaining in known:
                config_dict.setdefault(section, {})[remaining] = _coerce(value)
            else:
                logger.debug("Ignoring unknown config override %s", key)
            break

    return config_dict


def _dict_to_config(data: dict) -> ConcordConfig:
    """Convert a dict to ConcordConfig."""
    try:
        engine_config = EngineConfig(**data.get("engine", {}))
        dream_config = DreamConfig(**data.get("dream", {}))
    except TypeError as e:
        raise ConcordError(ErrorCode.CONFIG_INVALID, {"key": "config", "detail": str(e)}) from e

    if dream_config.cycle_delay_min > dream_config.cycle_delay_max:
        raise ConcordError(
            ErrorCode.CONFIG_INVALID,
            {"key": "dream.cycle_delay_min", "detail": "must not exceed cycle_delay_max"},
        )
    if engine_config.evolution_threshold <= 0:
        raise ConcordError(
            ErrorCode.CONFIG_INVALID,
            {"key": "engine.evolution_threshold", "detail": "must be positive"},
        )

    return ConcordConfig(
        engine=engine_config,
        dream=dream_config,
        debug=bool(data.get("debug", False)),
    )


def load_config(path: str | Path | None = None) -> ConcordConfig:
    """Load configuration from file with defaults and env overrides.

    Priority (highest to lowest):
    1. Environment variables (CONCORD_*)
    2. Explicit path if provided
    3. .concord/config.yaml (project-local)
    4. ~/.concord/config.yaml (user-global)
    5. Built-in defaults

    Args:
        path: Optional explicit config file path.

    Returns:
        Merged ConcordConfig instance.
    """
    global _config

    # Start with defaults as dict
    config_dict: dict[str, Any] = ConcordConfig().to_dict()

    config_paths = []
    if path:
        config_paths.append(Path(path))
    config_paths.extend([
        Path(".concord/config.yaml"),
        Path.home() / ".concord" / "config.yaml",
    ])

    for config_path in config_paths:
        if config_path.exists():
            try:
                with open(config_path) as f:
                    file_config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning("Skipping invalid config file %s: %s", config_path, e)
                continue
            _deep_update(config_dict, file_config)
            logger.debug("Loaded config from %s", config_path)
            break  # Use first found config

    config_dict = _apply_env_overrides(config_dict)

    with _config_lock:
        _config = _dict_to_config(config_dict)
        return _config


def get_config() -> ConcordConfig:
    """Get the current configuration, loading if needed."""
    if _config is not None:
        return _config
    return load_config()


def reset_config() -> None:
    """Forget the cached configuration (for testing)."""
    global _config
    with _config_lock:
        _config = None
