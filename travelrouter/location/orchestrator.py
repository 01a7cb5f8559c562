"""
Location reconfiguration for Travel Router.

This module sequences one "new location" run: join the venue WiFi, wait for
internet, bring up the VPN, and repair anything the VPN disturbed. Steps run
strictly in order and nothing is rolled back on failure: the venue profile
from a failed run stays in NetworkManager for inspection.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .. import config
from ..exceptions import DegradedInternetWarning, RouterError, RouterWarning
from ..external import ConnectivityProber, NordVPNClient, VpnSessionManager
from ..logging_config import get_logger
from ..models import LocationConfigRequest, ProbeOutcome
from ..network import (
    ConvergenceVerifier,
    IPForwarding,
    NetworkManagerCLI,
    ProfileReplacer,
    venue_profile,
    wait_for_association,
)
from ..reporting import ProgressReporter

logger = get_logger(__name__)


class OrchestratorState(Enum):
    IDLE = "idle"
    CONNECTING_WAN = "connecting-wan"
    AWAITING_INTERNET = "awaiting-internet"
    CONNECTING_VPN = "connecting-vpn"
    VERIFYING = "verifying"
    DONE = "done"
    FAILED = "failed"


STEP_LABELS = {
    OrchestratorState.CONNECTING_WAN: "Venue WiFi connection",
    OrchestratorState.CONNECTING_VPN: "VPN connection",
}


@dataclass
class OrchestrationResult:
    """Aggregate outcome of one location reconfiguration."""
    ssid: str
    state: OrchestratorState = OrchestratorState.IDLE
    failed_step: Optional[OrchestratorState] = None
    error: Optional[RouterError] = None
    region: Optional[str] = None
    public_address: Optional[str] = None
    wan_address: Optional[str] = None
    warnings: List[RouterWarning] = field(default_factory=list)
    history: List[OrchestratorState] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state is OrchestratorState.DONE

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1


class LocationOrchestrator:
    """Runs the Idle -> ... -> Done sequence for a LocationConfigRequest."""

    def __init__(
        self,
        network,
        replacer,
        prober,
        vpn,
        verifier,
        wan_interface,
        ap_interface,
        ap_ssid,
        default_region,
        wifi_timeout=config.DEFAULT_WIFI_TIMEOUT,
        internet_timeout=config.DEFAULT_INTERNET_TIMEOUT,
        reporter=None,
        sleep=time.sleep,
    ):
        self.network = network
        self.replacer = replacer
        self.prober = prober
        self.vpn = vpn
        self.verifier = verifier
        self.wan_interface = wan_interface
        self.ap_interface = ap_interface
        self.ap_ssid = ap_ssid
        self.default_region = default_region
        self.wifi_timeout = wifi_timeout
        self.internet_timeout = internet_timeout
        self.reporter = reporter or ProgressReporter()
        self.sleep = sleep
        self.state = OrchestratorState.IDLE

    @classmethod
    def from_config(cls, cfg, reporter=None):
        """Wire the orchestrator to the real system tools described by ``cfg``."""
        router = cfg["router"]
        vpn_cfg = cfg["vpn"]
        settings = cfg["settings"]

        network = NetworkManagerCLI()
        client = NordVPNClient()
        prober = ConnectivityProber(
            kill_switch_check=client.kill_switch_enabled,
            skip_on_kill_switch=vpn_cfg.get("skip_internet_check_on_killswitch", True),
        )
        return cls(
            network=network,
            replacer=ProfileReplacer(network),
            prober=prober,
            vpn=VpnSessionManager(client, prober=prober),
            verifier=ConvergenceVerifier(network, IPForwarding(), router["ap_interface"]),
            wan_interface=router["wan_interface"],
            ap_interface=router["ap_interface"],
            ap_ssid=router["ap_ssid"],
            default_region=vpn_cfg["country"],
            wifi_timeout=settings["wifi_timeout"],
            internet_timeout=settings["internet_timeout"],
            reporter=reporter,
        )

    def _enter(self, state, result):
        logger.debug(f"Orchestrator {self.state.value} -> {state.value}")
        self.state = state
        result.state = state
        result.history.append(state)

    def run(self, request: LocationConfigRequest) -> OrchestrationResult:
        """
        Reconfigure the router for a new location.

        Fatal errors end the run in FAILED with the failing step recorded;
        they are reported, not raised.
        """
        self.state = OrchestratorState.IDLE
        result = OrchestrationResult(ssid=request.ssid)
        result.history.append(self.state)
        region = request.region_or(self.default_region)

        self._banner(request, region)

        try:
            self._enter(OrchestratorState.CONNECTING_WAN, result)
            self._connect_wan(request, result)

            self._enter(OrchestratorState.AWAITING_INTERNET, result)
            self._await_internet(result)

            self._enter(OrchestratorState.CONNECTING_VPN, result)
            self._connect_vpn(region, result)
        except RouterError as e:
            result.failed_step = self.state
            result.error = e
            self._enter(OrchestratorState.FAILED, result)
            self.reporter.error(f"{STEP_LABELS.get(result.failed_step, 'Step')} failed: {e}")
            logger.error(f"Location reconfiguration failed at {result.failed_step.value}: {e}")
            return result

        self._enter(OrchestratorState.VERIFYING, result)
        self._verify(result)

        self._enter(OrchestratorState.DONE, result)
        self._summary(result)
        return result

    # --- Steps ---

    def _connect_wan(self, request, result):
        self.reporter.info(f"Connecting {self.wan_interface} to '{request.ssid}'...")
        self.replacer.replace_profile(venue_profile(request.ssid, request.password, self.wan_interface))

        self.reporter.progress("Waiting for WiFi association")
        wait_for_association(
            self.network,
            self.wan_interface,
            timeout=self.wifi_timeout,
            sleep=self.sleep,
            on_tick=self.reporter.tick,
        )
        self.reporter.done()

        result.wan_address = self.network.interface_address(self.wan_interface)
        self.reporter.ok(f"Connected to '{request.ssid}', local IP: {result.wan_address or 'unknown'}")

    def _await_internet(self, result):
        wait = self.prober.wait_for_internet(
            timeout=self.internet_timeout,
            on_start=lambda: self.reporter.progress("Waiting for internet connectivity"),
            on_tick=self.reporter.tick,
        )
        if wait.outcome is ProbeOutcome.SKIPPED:
            self.reporter.info("Skipping internet check (NordVPN kill switch active)")
        elif wait.outcome is ProbeOutcome.REACHABLE:
            self.reporter.done()
        else:
            warning = DegradedInternetWarning(
                f"Internet not reachable after {self.internet_timeout}s. Continuing anyway."
            )
            result.warnings.append(warning)
            self.reporter.warn(str(warning))

    def _connect_vpn(self, region, result):
        self.reporter.info(f"Connecting NordVPN ({region})...")

        def on_fallback(failed_region, output):
            self.reporter.warn(f"Could not connect VPN to '{failed_region}'. Trying default server...")

        session = self.vpn.connect(region, on_fallback=on_fallback)
        result.region = session.region
        result.public_address = session.public_address
        self.reporter.ok(f"VPN connected ({session.region})")
        self.reporter.ok(f"VPN active, public IP: {session.public_address or 'unknown'}")

    def _verify(self, result):
        verification = self.verifier.verify()
        for warning in verification.warnings:
            result.warnings.append(warning)
            self.reporter.warn(str(warning))
        if verification.ap_ok:
            self.reporter.ok(f"Hotspot '{self.ap_ssid}' is active on {self.ap_interface}")

    # --- Output ---

    def _banner(self, request, region):
        rule = "=" * 46
        self.reporter.info()
        self.reporter.info(rule)
        self.reporter.info(" Configuring for new location")
        self.reporter.info(rule)
        self.reporter.info(f" Venue WiFi   : {request.ssid}")
        self.reporter.info(f" WAN interface: {self.wan_interface}")
        self.reporter.info(f" VPN country  : {region}")
        self.reporter.info(rule)
        self.reporter.info()

    def _summary(self, result):
        rule = "=" * 46
        self.reporter.info()
        self.reporter.ok(rule)
        if result.warnings:
            self.reporter.ok(f" Location configured with {len(result.warnings)} warning(s)")
        else:
            self.reporter.ok(" Location configured successfully!")
        self.reporter.ok(rule)
        self.reporter.ok(f" Venue WiFi : {result.ssid}")
        self.reporter.ok(f" VPN region : {result.region}")
        self.reporter.ok(f" Public IP  : {result.public_address or 'unknown'}")
        self.reporter.ok()
        self.reporter.ok(f" Your devices on '{self.ap_ssid}' now have")
        self.reporter.ok(" VPN-protected internet access.")
        self.reporter.ok(" Run 'router-status' to check the router state")
        self.reporter.ok(" at any time.")
        self.reporter.ok(rule)
        self.reporter.info()
