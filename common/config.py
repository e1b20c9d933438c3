from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_CONFIG_PATH = "config/pyramid.yaml"
CONFIG_ENV_VAR = "PYRAMID_CONFIG"

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "pyramid": {
        "tile_size": 256,
        "legacy_tile_rounding": False,
        "strict": False,
    },
    "logging": {
        "level": "INFO",
        "format": "json",
    },
}


def _merge(defaults: Dict[str, Dict[str, Any]], loaded: Dict[str, Any]) -> Dict[str, Any]:
    # Shallow merge per section; unknown sections are kept as-is
    out: Dict[str, Any] = copy.deepcopy(defaults)
    for section, values in loaded.items():
        if isinstance(values, dict) and isinstance(out.get(section), dict):
            out[section].update(values)
        else:
            out[section] = values
    return out


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load YAML configuration.

    Path precedence: explicit `path`, env PYRAMID_CONFIG, config/pyramid.yaml.
    A missing file yields the built-in defaults; sections present in the file
    override defaults key by key.
    """
    cfg_path = Path(path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)
    if not cfg_path.exists():
        return copy.deepcopy(DEFAULTS)
    with cfg_path.open("r") as f:
        loaded = yaml.safe_load(f)
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config {cfg_path} must be a YAML mapping, got {type(loaded).__name__}")
    return _merge(DEFAULTS, loaded)
