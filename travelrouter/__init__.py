"""
Travel Router - Raspberry Pi WiFi-to-VPN travel router management.

Connects the Pi's WAN radio to venue WiFi, routes hotspot clients through
NordVPN, and keeps the hotspot and forwarding healthy afterwards.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from . import config, logging_config

__all__ = ["config", "logging_config"]
