# LetsEncrypt cPanel - Certificate Automation for cPanel Hosting Accounts
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Configuration loading and data root resolution.

Handles:
- Data root resolution (LETSENCRYPT_CPANEL_DATA_HOME, ~/.local/share)
- Packaged YAML defaults loading (letsencrypt_cpanel/defaults/config.yaml)
- User config discovery and merging (LETSENCRYPT_CPANEL_CONFIG,
  ~/.config/letsencrypt-cpanel/config.yaml)
- ANSI coloring constants for terminal output
"""

from __future__ import annotations

import copy
import os
import sys
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any

import yaml

APP_NAME = "letsencrypt-cpanel"


class ConfigError(ValueError):
    """Raised when configuration cannot be loaded or is malformed."""


# -----------------------
# Terminal constants
# -----------------------

ANSI_COLORS: dict[str, str] = {
    "yellow": "\033[38;5;226;1m",
    "reset": "\033[0m",
    "dim": "\033[2m",
    "green": "\033[32m",
    "red": "\033[31m",
}

TAG_COLORS: dict[str, str] = {
    "RUN": "green",
    "DEBUG": "dim",
    "WARN": "yellow",
    "ERR": "red",
}


# -----------------------
# Config model wrapper
# -----------------------


class YAMLConfig:
    """Simple config wrapper that implements ConfigModel protocol."""

    def __init__(self, config_dict: dict[str, Any]):
        self._config = config_dict

    @property
    def aliases(self) -> dict[str, str]:
        aliases = self._config.get("aliases") or {}
        if not isinstance(aliases, dict):
            raise ConfigError("'aliases' must be a mapping")
        result = {str(k): str(v) for k, v in aliases.items()}
        result.setdefault("self", self.interpreter)
        return result

    @property
    def defaults(self) -> dict[str, list[Any]]:
        defaults = self._config.get("defaults") or {}
        if not isinstance(defaults, dict):
            raise ConfigError("'defaults' must be a mapping")
        result: dict[str, list[Any]] = {}
        for name, entries in defaults.items():
            if entries is None:
                entries = []
            if not isinstance(entries, list):
                raise ConfigError(
                    f"defaults for {name!r} must be a list"
                )
            result[str(name)] = entries
        return result

    @property
    def system(self) -> dict[str, Any]:
        sys_cfg = self._config.get("system", {})
        return sys_cfg if isinstance(sys_cfg, dict) else {}

    @property
    def interpreter(self) -> str:
        return self.system.get("interpreter") or sys.executable

    @property
    def uapi_binary(self) -> str:
        return self.system.get("uapi") or "/usr/bin/uapi"

    @property
    def account(self) -> str | None:
        return self.system.get("account") or None

    @property
    def verbose(self) -> bool:
        return bool(self.system.get("verbose", False))

    @property
    def notify(self) -> str | None:
        return self.system.get("notify") or None

    @property
    def tmp_dir(self) -> str | None:
        return self.system.get("tmp_dir") or None

    @property
    def timeout(self) -> float | None:
        value = self.system.get("timeout")
        if value is None:
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigError(f"system.timeout must be a number: {value!r}")

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def get_path(self, path: str, default: Any = None) -> Any:
        """
        Nested lookup using dot-separated path.
        Example: get_path("notification.smtp_host", "localhost")
        """
        if not path:
            return default

        cur: Any = self._config
        for part in path.split("."):
            if not isinstance(cur, dict):
                return default
            if part not in cur:
                return default
            cur = cur[part]
        return cur


# -----------------------
# Data root + paths
# -----------------------


def get_data_root() -> Path:
    """Get the data root directory.

    Resolution order:
    1. LETSENCRYPT_CPANEL_DATA_HOME environment variable (if set)
    2. ~/.local/share (default, XDG_DATA_HOME is ignored)
    """
    data_home = os.getenv("LETSENCRYPT_CPANEL_DATA_HOME")
    if data_home:
        root = Path(data_home)
    else:
        root = Path.home() / ".local" / "share"

    root.mkdir(parents=True, exist_ok=True)
    return root


def crash_log_path(data_root: Path) -> Path:
    """<data_root>/letsencrypt-cpanel/logs/crash.log"""
    return data_root / APP_NAME / "logs" / "crash.log"


def user_config_path() -> Path:
    """Get the user config file path.

    Resolution order:
    1. LETSENCRYPT_CPANEL_CONFIG environment variable (if set)
    2. ~/.config/letsencrypt-cpanel/config.yaml
    """
    explicit = os.getenv("LETSENCRYPT_CPANEL_CONFIG")
    if explicit:
        return Path(explicit)
    return Path.home() / ".config" / APP_NAME / "config.yaml"


# -----------------------
# YAML loading
# -----------------------


def _defaults_dir() -> Path:
    """Return the installed path to packaged defaults directory."""
    return Path(
        importlib_resources.files("letsencrypt_cpanel.defaults")
    )  # type: ignore[arg-type]


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file that must contain a mapping (empty file -> {})."""
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must load to a mapping/dict.")
    return data


def load_defaults_yaml(filename: str = "config.yaml") -> dict[str, Any]:
    """
    Load a YAML file from letsencrypt_cpanel/defaults/.
    """
    defaults_dir = _defaults_dir()
    path = defaults_dir / filename
    if not path.exists():
        raise FileNotFoundError(
            f"Missing defaults YAML: {filename} "
            f"(looked in {defaults_dir})"
        )
    return load_yaml(path)


def merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_dicts(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(path: Path | None = None) -> YAMLConfig:
    """Load packaged defaults and merge the user config over them.

    An explicit path must exist; the implicit user config path is optional.
    """
    data = load_defaults_yaml()

    if path is not None:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        data = merge_dicts(data, load_yaml(path))
    else:
        user_path = user_config_path()
        if user_path.exists():
            data = merge_dicts(data, load_yaml(user_path))

    return YAMLConfig(data)
