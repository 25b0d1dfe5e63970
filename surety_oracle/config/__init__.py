# surety_oracle/config/__init__.py
"""
Static network profiles and node constants.

Profiles live in config.json next to this file, keyed by name:

    {"localhost": {"url": "http://localhost:9545", "appAddress": "0x..."}}

The active profile is chosen by --profile, then SURETY_PROFILE, then
"localhost".
"""

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from web3 import Web3

from surety_oracle import ConfigError

CONFIG_DIR = Path(__file__).parent
CONFIG_PATH = CONFIG_DIR / "config.json"
DEFAULT_PROFILE = "localhost"
PROFILE_ENV = "SURETY_PROFILE"

# ── Oracle bootstrap ──────────────────────────────────────────────────────────

NUM_ORACLES = 25
REGISTRATION_GAS = 3000000
RESPONSE_GAS = 5000000

# ── Event stream ──────────────────────────────────────────────────────────────

FROM_BLOCK = 0
POLL_INTERVAL = 1.0  # seconds between get_logs polls

# ── Status API ────────────────────────────────────────────────────────────────

API_HOST = "0.0.0.0"
API_PORT = 3000
ABI_PATH = Path("build/contracts/FlightSuretyApp.json")


@dataclass(frozen=True)
class NetworkProfile:
    name: str
    url: str
    app_address: str
    data_address: Optional[str] = None

    @property
    def ws_url(self) -> str:
        return websocket_url(self.url)


def websocket_url(url: str) -> str:
    """http://host:port -> ws://host:port (https -> wss). ws URLs pass through."""
    return re.sub(r"^http", "ws", url)


def profile_name(name=None) -> str:
    return name or os.environ.get(PROFILE_ENV) or DEFAULT_PROFILE


def load_profile(name=None, path=None) -> NetworkProfile:
    """Load one named profile from the static config file."""
    name = profile_name(name)
    path = Path(path) if path else CONFIG_PATH
    try:
        with open(path) as f:
            profiles = json.load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file {path} is not valid JSON: {e}")

    if name not in profiles:
        known = ", ".join(sorted(profiles)) or "none"
        raise ConfigError(f"Unknown profile '{name}' (known: {known})")

    entry = profiles[name]
    for key in ("url", "appAddress"):
        if not entry.get(key):
            raise ConfigError(f"Profile '{name}' is missing '{key}'")
    for key in ("appAddress", "dataAddress"):
        if entry.get(key) and not Web3.is_address(entry[key]):
            raise ConfigError(f"Profile '{name}' has an invalid {key}: {entry[key]}")

    return NetworkProfile(
        name=name,
        url=entry["url"],
        app_address=entry["appAddress"],
        data_address=entry.get("dataAddress"),
    )
