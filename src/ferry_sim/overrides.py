from __future__ import annotations

from typing import Any, Dict

from .errors import ConfigurationError
from .scenarios import CONFIG_KEYS, config_from_dict, validate_config


def _same_kind(value: Any, base: Any) -> bool:
    # bool is an int subclass, so it is matched first in both directions.
    if isinstance(base, bool) or isinstance(value, bool):
        return isinstance(base, bool) and isinstance(value, bool)
    if isinstance(base, int):
        return isinstance(value, int)
    if isinstance(base, float):
        return isinstance(value, (int, float))
    return isinstance(value, type(base))


def apply_overrides(config: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Merge `overrides` onto a copy of the `config` dict and check the result would run.

    The input dict is left untouched. Peak windows may arrive as JSON `[start, end]` lists.
    """
    if not isinstance(config, dict) or not config:
        raise ConfigurationError("Config must be a non-empty dict.")
    if not overrides:
        return dict(config)

    unknown = sorted(key for key in overrides if key not in CONFIG_KEYS or key not in config)
    if unknown:
        raise ConfigurationError(f"Unknown override keys: {', '.join(unknown)}")

    for key, value in overrides.items():
        if not _same_kind(value, config[key]):
            raise ConfigurationError(
                f"Override '{key}' must be {type(config[key]).__name__}, got {value!r}."
            )

    merged = {**config, **overrides}
    validate_config(config_from_dict(merged))
    return merged
