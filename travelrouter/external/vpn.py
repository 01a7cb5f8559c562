"""
NordVPN integration for Travel Router.

This module wraps the ``nordvpn`` CLI and its ``nordvpnd`` daemon, and drives
the VPN session through its Disconnected -> Connecting -> Connected states.
"""

import re
import time
from typing import Dict, List, Optional, Tuple

from .. import config
from ..exceptions import VpnAuthError, VpnConnectError
from ..logging_config import get_logger
from ..models import VpnSession, VpnStatus
from ..utils import CommandResult, run_command

logger = get_logger(__name__)

# nordvpn prints a spinner ("-\r  \r") before its real output
_SPINNER_RE = re.compile(r"^[\s\-\\|/\r]+")

_ALLOWED_TRANSITIONS = {
    (VpnStatus.DISCONNECTED, VpnStatus.CONNECTING),
    (VpnStatus.CONNECTING, VpnStatus.CONNECTED),
    (VpnStatus.CONNECTING, VpnStatus.DISCONNECTED),
    (VpnStatus.CONNECTED, VpnStatus.DISCONNECTED),
}


def parse_key_values(text: str) -> Dict[str, str]:
    """Parse ``Key: value`` lines from nordvpn status/settings output."""
    values = {}
    for line in text.splitlines():
        line = _SPINNER_RE.sub("", line.split("\r")[-1])
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        values[key.strip().lower()] = value.strip()
    return values


def parse_countries(text: str) -> List[str]:
    """Parse ``nordvpn countries`` output, which is comma, tab or newline separated."""
    countries = []
    for token in re.split(r"[,\t\n]+", text):
        token = _SPINNER_RE.sub("", token.split("\r")[-1]).strip()
        if token and token not in countries:
            countries.append(token)
    return countries


class NordVPNClient:
    """Thin wrapper around the ``nordvpn`` CLI and ``systemctl``."""

    def __init__(self, binary="nordvpn", service=config.VPN_DAEMON_SERVICE):
        self.binary = binary
        self.service = service

    def _run(self, *args, quiet_on_error=False) -> CommandResult:
        return run_command([self.binary, *args], quiet_on_error=quiet_on_error)

    def is_installed(self) -> bool:
        return self._run("--version", quiet_on_error=True).ok

    def daemon_running(self) -> bool:
        return run_command(["systemctl", "is-active", "--quiet", self.service], quiet_on_error=True).ok

    def start_daemon(self) -> CommandResult:
        logger.info(f"Starting {self.service}")
        return run_command(["systemctl", "start", self.service])

    def is_logged_in(self) -> bool:
        return self._run("account", quiet_on_error=True).ok

    def status_text(self) -> str:
        return self._run("status", quiet_on_error=True).output

    def status(self) -> Dict[str, str]:
        return parse_key_values(self.status_text())

    def settings(self) -> Dict[str, str]:
        return parse_key_values(self._run("settings", quiet_on_error=True).output)

    def kill_switch_enabled(self) -> bool:
        return self.settings().get("kill switch", "").lower() == "enabled"

    def connect(self, region: Optional[str] = None) -> CommandResult:
        args = ["connect"] + ([region] if region else [])
        return self._run(*args)

    def disconnect(self) -> CommandResult:
        return self._run("disconnect", quiet_on_error=True)

    def countries(self) -> List[str]:
        result = self._run("countries")
        return parse_countries(result.stdout) if result.ok else []


class VpnSessionManager:
    """
    Issues VPN session transitions and records them.

    The daemon owns the session. This class keeps a local view of it so that
    every state change it causes appears in ``transitions`` in order.
    """

    def __init__(
        self,
        client,
        prober=None,
        fallback_region=None,
        sleep=time.sleep,
        daemon_start_delay=config.VPN_DAEMON_START_DELAY,
        disconnect_delay=config.VPN_DISCONNECT_DELAY,
        route_settle_delay=config.VPN_ROUTE_SETTLE_DELAY,
    ):
        """
        Args:
            client: NordVPNClient (or a test fake)
            prober: Optional ConnectivityProber used to read back the public address
            fallback_region: Region for the single fallback attempt; None lets
                the daemon pick the best server
            sleep: Sleep function (injectable for tests)
        """
        self.client = client
        self.prober = prober
        self.fallback_region = fallback_region
        self.sleep = sleep
        self.daemon_start_delay = daemon_start_delay
        self.disconnect_delay = disconnect_delay
        self.route_settle_delay = route_settle_delay
        self.transitions: List[Tuple[VpnStatus, VpnStatus]] = []
        self._session = VpnSession()

    def _transition(self, new_status: VpnStatus, region: Optional[str] = None) -> None:
        old_status = self._session.status
        if (old_status, new_status) not in _ALLOWED_TRANSITIONS:
            raise RuntimeError(f"Illegal VPN transition {old_status.value} -> {new_status.value}")
        logger.debug(f"VPN {old_status.value} -> {new_status.value}")
        self.transitions.append((old_status, new_status))
        self._session.status = new_status
        if new_status is VpnStatus.DISCONNECTED:
            self._session.region = None
            self._session.public_address = None
        elif region is not None:
            self._session.region = region

    def status(self) -> VpnSession:
        """Read the daemon's session status and resynchronize the local view."""
        info = self.client.status()
        raw = info.get("status", "").lower()
        if raw == "connected":
            self._session.status = VpnStatus.CONNECTED
            self._session.region = info.get("country") or self._session.region
            self._session.public_address = info.get("ip") or self._session.public_address
        elif raw == "connecting":
            self._session.status = VpnStatus.CONNECTING
        else:
            self._session.status = VpnStatus.DISCONNECTED
            self._session.region = None
            self._session.public_address = None
        return VpnSession(self._session.region, self._session.status, self._session.public_address)

    def ensure_daemon(self) -> None:
        if self.client.daemon_running():
            return
        result = self.client.start_daemon()
        if not result.ok:
            raise VpnConnectError(f"Could not start {config.VPN_DAEMON_SERVICE}", result.output)
        self.sleep(self.daemon_start_delay)

    def disconnect(self) -> None:
        result = self.client.disconnect()
        if not result.ok:
            logger.debug(f"nordvpn disconnect reported: {result.output}")
        if self._session.status is not VpnStatus.DISCONNECTED:
            self._transition(VpnStatus.DISCONNECTED)

    def connect(self, region: str, on_fallback=None) -> VpnSession:
        """
        Connect to ``region``, falling back once to the default server.

        Args:
            region: Requested VPN country or group
            on_fallback: Called with (region, error output) before the fallback attempt

        Raises:
            VpnAuthError: No authenticated NordVPN session
            VpnConnectError: Daemon could not start, or both attempts failed
        """
        self.ensure_daemon()

        if not self.client.is_logged_in():
            raise VpnAuthError("NordVPN is not logged in. Run 'nordvpn login --token <token>' first")

        # Always pass through Disconnected so the old region's routes go away
        if self.status().status is not VpnStatus.DISCONNECTED:
            self.disconnect()
            self.sleep(self.disconnect_delay)

        fallback_used = False
        self._transition(VpnStatus.CONNECTING, region)
        result = self.client.connect(region)
        if result.ok:
            connected_region = region
        else:
            logger.info(f"Could not connect VPN to '{region}': {result.output}")
            if on_fallback:
                on_fallback(region, result.output)
            self._transition(VpnStatus.DISCONNECTED)
            fallback_used = True

            self._transition(VpnStatus.CONNECTING, self.fallback_region)
            result = self.client.connect(self.fallback_region)
            if not result.ok:
                self._transition(VpnStatus.DISCONNECTED)
                raise VpnConnectError("VPN connection failed completely. Check 'nordvpn status'", result.output)
            connected_region = (
                self.client.status().get("country") or self.fallback_region or config.AUTO_REGION
            )

        self._transition(VpnStatus.CONNECTED, connected_region)

        if self.prober is not None:
            self.sleep(self.route_settle_delay)
            check = self.prober.probe(config.PROBE_STATUS_TIMEOUT)
            self._session.public_address = check.observed_address

        return VpnSession(
            region=self._session.region,
            status=self._session.status,
            public_address=self._session.public_address,
            fallback_used=fallback_used,
        )
