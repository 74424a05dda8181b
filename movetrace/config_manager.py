"""Configuration manager for movetrace using TOML files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import toml

logger = logging.getLogger(__name__)


DEFAULT_NETWORK_CONFIG = {
    "default": "mainnet",
    "api_key": "",
}


def _config_path() -> Path:
    from .config import CONFIG_FILE

    return CONFIG_FILE


def load_full_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    path = path or _config_path()
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (toml.TomlDecodeError, OSError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", path, exc)
        return {}


def load_network_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the ``[network]`` section, falling back to defaults.

    Returns:
        Dictionary with at least ``default`` and ``api_key`` keys.
    """
    merged = DEFAULT_NETWORK_CONFIG.copy()
    merged.update(load_full_config(path).get("network", {}))
    return merged


def save_network_config(path: Optional[Path] = None, **values: str) -> Path:
    """Update keys of the ``[network]`` section, preserving other sections.

    Args:
        path: Config file location (defaults to ``~/.movetrace/config.toml``).
        **values: Keys to set, e.g. ``default="testnet"`` or ``api_key="..."``.

    Returns:
        The path written to.
    """
    path = path or _config_path()
    config = load_full_config(path)
    section = config.setdefault("network", {})
    section.update(values)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        toml.dump(config, f)
    return path
