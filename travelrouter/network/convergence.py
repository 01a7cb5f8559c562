"""
Post-VPN convergence checks for Travel Router.

The VPN daemon rewrites routes, firewall chains and sysctls while it sets up
a tunnel. These checks put back the two things the router depends on: the
access point being up and IPv4 forwarding being enabled.
"""

from dataclasses import dataclass, field
from typing import List

from .. import config
from ..exceptions import ApDownWarning, ForwardingResetWarning, RouterWarning
from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class VerificationResult:
    ap_ok: bool
    forwarding_ok: bool
    warnings: List[RouterWarning] = field(default_factory=list)


class ConvergenceVerifier:
    """Idempotent AP and forwarding repair, safe to run after any VPN change."""

    def __init__(self, network, forwarding, ap_interface, ap_profile_name=config.AP_PROFILE_NAME):
        self.network = network
        self.forwarding = forwarding
        self.ap_interface = ap_interface
        self.ap_profile_name = ap_profile_name

    def verify(self) -> VerificationResult:
        warnings = []
        ap_ok = self._verify_ap(warnings)
        forwarding_ok = self._verify_forwarding(warnings)
        return VerificationResult(ap_ok=ap_ok, forwarding_ok=forwarding_ok, warnings=warnings)

    def _verify_ap(self, warnings):
        if self.network.is_active(self.ap_profile_name, self.ap_interface):
            logger.debug(f"AP profile '{self.ap_profile_name}' active on {self.ap_interface}")
            return True

        # AP settings are unchanged; reactivate in place
        result = self.network.connection_up(self.ap_profile_name)
        if result.ok:
            warnings.append(ApDownWarning("Hotspot was down and has been restarted"))
            return True

        warnings.append(
            ApDownWarning(
                f"Could not restart hotspot. Check 'nmcli con show {self.ap_profile_name}'"
            )
        )
        logger.error(f"Failed to reactivate '{self.ap_profile_name}': {result.output}")
        return False

    def _verify_forwarding(self, warnings):
        if self.forwarding.is_enabled():
            return True

        enabled = self.forwarding.enable()
        if enabled:
            warnings.append(ForwardingResetWarning("IP forwarding was disabled and has been re-enabled"))
        else:
            warnings.append(ForwardingResetWarning("IP forwarding is disabled and could not be re-enabled"))
            logger.error("Failed to re-enable IP forwarding")
        return enabled
