# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/stage0/config/loader.py

import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from .models import StageConfig, current_platform, platform_defaults

log = logging.getLogger("stage0")

CONFIG_ENV = "STAGE0_CONFIG"


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Recursively merge *override* into *base* (mutates base).
    Only overwrites when the override value is non-empty.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            _deep_merge(base[key], value)
        else:
            if value not in (None, ""):
                base[key] = value
    return base


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    raw = path.read_text()
    expanded = os.path.expandvars(raw)
    data = yaml.safe_load(expanded) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return data


def find_config_file(explicit: str | Path | None = None) -> Optional[Path]:
    """
    Locate the stager config:

    1. explicit path (``--config``)
    2. ``STAGE0_CONFIG`` environment variable
    3. none: built-in platform defaults only
    """
    if explicit:
        return Path(explicit)
    env = os.environ.get(CONFIG_ENV)
    if env:
        p = Path(env)
        if p.is_file():
            return p
        log.warning("%s=%s does not exist, using built-in defaults", CONFIG_ENV, env)
    return None


def load_config(path: str | Path | None = None) -> StageConfig:
    """
    Build a validated StageConfig.

    The YAML file may set ``platform``; its defaults are then used as the base
    and the rest of the file is deep-merged over them. Without a file the
    defaults of the running platform apply.
    """
    cfg_path = find_config_file(path)
    data: dict = {}
    if cfg_path is not None:
        log.debug("Loading config from %s", cfg_path)
        data = _load_yaml(cfg_path)

    platform = data.get("platform") or current_platform()
    merged = _deep_merge(platform_defaults(platform), data)
    return StageConfig.model_validate(merged)
