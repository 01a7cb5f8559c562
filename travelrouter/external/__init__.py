"""
External services module for Travel Router.

This module handles interactions with services outside the Pi:
- Internet reachability checks against a public address endpoint
- The NordVPN client and daemon
"""

from .probe import ConnectivityProber
from .vpn import NordVPNClient, VpnSessionManager, parse_countries, parse_key_values

__all__ = [
    "ConnectivityProber",
    "NordVPNClient",
    "VpnSessionManager",
    "parse_countries",
    "parse_key_values",
]
