"""
Configuration management for Travel Router.

This module handles loading, validation, and default configuration values
for the Travel Router application.
"""

import copy
import ipaddress
from pathlib import Path

import toml

from .exceptions import ConfigurationError

# --- App Constants ---
APP_NAME = "travelrouter"
CONFIG_DIR = Path("/etc") / APP_NAME
CONFIG_FILE = CONFIG_DIR / "config.toml"
LOG_DIR = Path("/var/log") / APP_NAME
LOG_FILE = LOG_DIR / "travelrouter.log"

# --- Logging Constants ---
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# --- Network Profile Constants ---
AP_PROFILE_NAME = "travel-router-ap"
VENUE_PROFILE_NAME = "venue-wifi"
FALLBACK_PROFILE_NAME = "phone-hotspot"
AP_PRIORITY = 100
VENUE_PRIORITY = 50  # Above the phone hotspot so venue WiFi wins on reboot
FALLBACK_PRIORITY = 10

# --- External Service Constants ---
CHECKIP_URL = "https://checkip.amazonaws.com"
PROBE_ATTEMPT_TIMEOUT = 3  # seconds per reachability attempt while polling
PROBE_STATUS_TIMEOUT = 5  # seconds for one-shot status/read-back probes

# --- Polling Constants ---
DEFAULT_WIFI_TIMEOUT = 30  # seconds to wait for WiFi association
DEFAULT_INTERNET_TIMEOUT = 20  # seconds to wait for internet connectivity
POLL_INTERVAL = 1
VPN_DAEMON_START_DELAY = 2
VPN_DISCONNECT_DELAY = 2
VPN_ROUTE_SETTLE_DELAY = 2

# --- VPN Constants ---
VPN_DAEMON_SERVICE = "nordvpnd"
DEFAULT_VPN_COUNTRY = "United_States"
AUTO_REGION = "auto"

MIN_AP_PASSWORD_LENGTH = 8

DEFAULT_CONFIG = {
    "settings": {
        "debug": False,
        "wifi_timeout": DEFAULT_WIFI_TIMEOUT,
        "internet_timeout": DEFAULT_INTERNET_TIMEOUT,
    },
    "router": {
        "wan_interface": "wlan1",
        "ap_interface": "wlan0",
        "ap_ssid": "travel-pi",
        "ap_password": "",
        "ap_ip": "192.168.10.1",
        "ap_subnet": "192.168.10.0/24",
        "ap_band": "bg",
        "ap_channel": 6,
    },
    "vpn": {
        "country": DEFAULT_VPN_COUNTRY,
        "skip_internet_check_on_killswitch": True,
    },
    "fallback_hotspot": {
        "ssid": "",
        "password": "",
    },
}


def get_config_path():
    """Gets the path to the configuration file."""
    return CONFIG_FILE


def _merge_defaults(loaded):
    """Overlay a loaded config on top of the defaults, section by section."""
    merged = copy.deepcopy(DEFAULT_CONFIG)
    for section, values in loaded.items():
        if section in merged and not isinstance(values, dict):
            raise ConfigurationError(f"[{section}] must be a table, not {type(values).__name__}")
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section].update(values)
        else:
            merged[section] = values
    return merged


def load_config(path=None, create=True):
    """
    Loads the configuration from the TOML file.

    A missing file is written out with the defaults when ``create`` is set;
    read-only callers pass ``create=False`` and just get the defaults.
    """
    path = Path(path) if path else get_config_path()
    if not path.exists():
        if create:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as f:
                toml.dump(DEFAULT_CONFIG, f)
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(path, "r", encoding="utf-8") as f:
            loaded = toml.load(f)
    except (toml.TomlDecodeError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Could not parse {path}: {e}") from e

    from .logging_config import get_logger

    logger = get_logger(__name__)
    logger.debug(f"Loaded config sections from {path}: {list(loaded.keys())}")
    return _merge_defaults(loaded)


def validate_config(cfg, require_ap_password=False):
    """
    Check that the values the router needs at run time are present and sane.

    Args:
        cfg: Configuration dictionary as returned by load_config()
        require_ap_password: Also validate the AP password (only needed when
            the access point profile is being (re)created)

    Raises:
        ConfigurationError: On the first problem found
    """
    router = cfg.get("router", {})
    vpn = cfg.get("vpn", {})

    for key in ("wan_interface", "ap_interface", "ap_ssid"):
        if not router.get(key):
            raise ConfigurationError(f"router.{key} is not set")

    if router["wan_interface"] == router["ap_interface"]:
        raise ConfigurationError("router.ap_interface and router.wan_interface must be different")

    if not vpn.get("country"):
        raise ConfigurationError("vpn.country is not set")

    try:
        ipaddress.ip_network(router.get("ap_subnet", ""), strict=False)
    except ValueError as e:
        raise ConfigurationError(f"router.ap_subnet is invalid: {e}") from e

    if require_ap_password:
        password = router.get("ap_password", "")
        if len(password) < MIN_AP_PASSWORD_LENGTH:
            raise ConfigurationError(
                f"router.ap_password must be at least {MIN_AP_PASSWORD_LENGTH} characters"
            )

    for key in ("wifi_timeout", "internet_timeout"):
        value = cfg.get("settings", {}).get(key)
        if not isinstance(value, int) or value <= 0:
            raise ConfigurationError(f"settings.{key} must be a positive integer")

    return cfg
