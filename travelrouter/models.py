"""Data models for Travel Router."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from .exceptions import FatalInputError


class ProfileRole(Enum):
    """Logical role of a NetworkManager profile. At most one is active per role."""
    ACCESS_POINT = "access-point"
    VENUE_NETWORK = "venue-network"
    FALLBACK_HOTSPOT = "fallback-hotspot"


@dataclass
class NetworkProfile:
    """Desired state of one NetworkManager WiFi profile."""
    role: ProfileRole
    name: str
    interface: str
    priority: int
    ssid: str
    password: Optional[str] = None
    # Extra ``nmcli con add`` settings, e.g. AP mode and addressing
    settings: Dict[str, str] = field(default_factory=dict)
    # Saved-only profiles are left for NetworkManager to autoconnect
    activate: bool = True


@dataclass
class ProfileHandle:
    """A profile that has been (re)created by the replacer."""
    role: ProfileRole
    name: str
    interface: str
    active: bool


@dataclass
class ConnectivityCheckResult:
    """Result of a single reachability probe."""
    reachable: bool
    observed_address: Optional[str] = None
    elapsed_seconds: int = 0


class ProbeOutcome(Enum):
    """Outcome of a bounded wait for internet connectivity."""
    REACHABLE = "reachable"
    TIMED_OUT = "timed-out"
    SKIPPED = "skipped"


@dataclass
class InternetWaitResult:
    outcome: ProbeOutcome
    elapsed_seconds: int = 0
    attempts: int = 0
    observed_address: Optional[str] = None


class VpnStatus(Enum):
    """VPN connection status"""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass
class VpnSession:
    """Snapshot of the VPN daemon's session as seen by this process."""
    region: Optional[str] = None
    status: VpnStatus = VpnStatus.DISCONNECTED
    public_address: Optional[str] = None
    # Set when the requested region failed and the fallback server was used
    fallback_used: bool = False


@dataclass(frozen=True)
class LocationConfigRequest:
    """Operator input for one location reconfiguration; immutable for the run."""
    ssid: str
    password: str
    vpn_region: Optional[str] = None

    def __post_init__(self):
        if not self.ssid:
            raise FatalInputError("SSID cannot be empty")
        if not self.password:
            raise FatalInputError("Password cannot be empty")

    def region_or(self, default_region: str) -> str:
        """The requested VPN region, falling back to the configured default."""
        return self.vpn_region or default_region
