"""Configuration paths and defaults for movetrace."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("MOVETRACE_HOME", str(Path.home() / ".movetrace"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"
CACHE_FILE = BASE_DIR / "package_metadata.json"

NETWORKS = ("mainnet", "testnet", "devnet", "local")

# Fullnode REST endpoints per network
NODE_URLS = {
    "mainnet": "https://api.mainnet.aptoslabs.com/v1",
    "testnet": "https://api.testnet.aptoslabs.com/v1",
    "devnet": "https://api.devnet.aptoslabs.com/v1",
    "local": "http://127.0.0.1:8080/v1",
}

REQUEST_TIMEOUT = 30

from .config_manager import load_network_config  # noqa: E402


def default_network(settings: dict) -> str:
    """Configured default network, or mainnet when the stored value is unknown."""
    network = settings.get("default", "mainnet")
    return network if network in NETWORKS else "mainnet"


_network_config = load_network_config()

# Values below come from ~/.movetrace/config.toml (set via `movetrace config ...`)
DEFAULT_NETWORK = default_network(_network_config)
API_KEY = os.environ.get("APTOS_API_KEY") or _network_config.get("api_key", "")
NODE_URL_OVERRIDE = _network_config.get("node_url", "")


def ensure_base_dirs() -> None:
    """Create the base directory for local state if needed."""
    BASE_DIR.mkdir(parents=True, exist_ok=True)
