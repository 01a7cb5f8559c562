"""
Network module for Travel Router.

This module handles all local network operations:
- NetworkManager profile and device queries (nmcli)
- Delete-then-recreate replacement of the router's profiles
- Waiting for the WAN radio to associate
- IP forwarding and post-VPN convergence repair
"""

from .manager import NetworkManagerCLI, STATE_CONNECTED
from .association import wait_for_association
from .profiles import (
    ProfileReplacer,
    venue_profile,
    fallback_hotspot_profile,
    access_point_profile,
)
from .forwarding import IPForwarding
from .convergence import ConvergenceVerifier, VerificationResult

__all__ = [
    "NetworkManagerCLI",
    "STATE_CONNECTED",
    "wait_for_association",
    "ProfileReplacer",
    "venue_profile",
    "fallback_hotspot_profile",
    "access_point_profile",
    "IPForwarding",
    "ConvergenceVerifier",
    "VerificationResult",
]
