"""
Network profile replacement for Travel Router.

Profiles are never edited in place. NetworkManager can keep cached secrets
and stale security negotiation state for a profile name it has seen before,
which silently breaks association at the next venue. Every reconfiguration
therefore brings down whatever is active on the interface, deletes the stored
profile by name, and creates it again.
"""

from .. import config
from ..exceptions import CredentialError, ProfileError
from ..logging_config import get_logger
from ..models import NetworkProfile, ProfileHandle, ProfileRole

logger = get_logger(__name__)


def venue_profile(ssid, password, interface):
    """Desired profile for the venue WiFi on the WAN radio."""
    return NetworkProfile(
        role=ProfileRole.VENUE_NETWORK,
        name=config.VENUE_PROFILE_NAME,
        interface=interface,
        priority=config.VENUE_PRIORITY,
        ssid=ssid,
        password=password,
    )


def fallback_hotspot_profile(ssid, password, interface):
    """Desired profile for the phone hotspot the WAN radio falls back to."""
    settings = {}
    if password:
        settings["wifi-sec.key-mgmt"] = "wpa-psk"
        settings["wifi-sec.psk"] = password
    return NetworkProfile(
        role=ProfileRole.FALLBACK_HOTSPOT,
        name=config.FALLBACK_PROFILE_NAME,
        interface=interface,
        priority=config.FALLBACK_PRIORITY,
        ssid=ssid,
        password=password or None,
        settings=settings,
        activate=False,
    )


def access_point_profile(router_cfg):
    """Desired profile for the local hotspot, from the ``[router]`` config section."""
    return NetworkProfile(
        role=ProfileRole.ACCESS_POINT,
        name=config.AP_PROFILE_NAME,
        interface=router_cfg["ap_interface"],
        priority=config.AP_PRIORITY,
        ssid=router_cfg["ap_ssid"],
        password=router_cfg["ap_password"],
        settings={
            "mode": "ap",
            # shared: NetworkManager assigns ap_ip, runs DHCP and masquerades
            "ipv4.method": "shared",
            "ipv4.addresses": f"{router_cfg['ap_ip']}/24",
            "ipv6.method": "disabled",
            "802-11-wireless.band": router_cfg.get("ap_band", "bg"),
            "802-11-wireless.channel": router_cfg.get("ap_channel", 6),
            "wifi-sec.key-mgmt": "wpa-psk",
            "wifi-sec.psk": router_cfg["ap_password"],
        },
    )


class ProfileReplacer:
    """Delete-then-recreate manager for the router's NetworkManager profiles."""

    def __init__(self, network):
        self.network = network

    def replace_profile(self, profile: NetworkProfile) -> ProfileHandle:
        """
        Replace the stored profile for ``profile.role`` with a fresh one.

        Args:
            profile: Desired profile

        Returns:
            ProfileHandle for the new profile

        Raises:
            CredentialError: The venue network refused to associate
            ProfileError: Any other NetworkManager failure
        """
        logger.info(f"Replacing {profile.role.value} profile '{profile.name}' on {profile.interface}")

        if profile.activate:
            self._bring_down_interface(profile.interface)
        self._delete_stored(profile.name)

        if profile.role is ProfileRole.VENUE_NETWORK:
            self._create_venue(profile)
        else:
            self._create_and_maybe_activate(profile)

        return ProfileHandle(
            role=profile.role,
            name=profile.name,
            interface=profile.interface,
            active=profile.activate,
        )

    def _bring_down_interface(self, interface):
        existing = self.network.active_connection_on(interface)
        if existing:
            logger.debug(f"Bringing down '{existing}' on {interface}")
            self.network.connection_down(existing)

    def _delete_stored(self, name):
        result = self.network.connection_delete(name)
        if result.ok or self.network.is_not_found(result):
            return
        raise ProfileError(f"Could not delete stored profile '{name}'", result.output)

    def _create_venue(self, profile):
        # nmcli creates and activates the client profile in one step
        result = self.network.wifi_connect(profile.ssid, profile.password, profile.interface, profile.name)
        if not result.ok:
            raise CredentialError(
                f"Failed to connect to '{profile.ssid}'. Check the SSID and password",
                result.output,
            )

        modified = self.network.connection_modify(
            profile.name, {"connection.autoconnect-priority": profile.priority}
        )
        if not modified.ok:
            logger.debug(f"Could not set autoconnect priority on '{profile.name}': {modified.output}")

    def _create_and_maybe_activate(self, profile):
        settings = {"ssid": profile.ssid}
        settings.update(profile.settings)
        settings["connection.autoconnect"] = "yes"
        settings["connection.autoconnect-priority"] = profile.priority

        result = self.network.connection_add(profile.name, profile.interface, settings)
        if not result.ok:
            raise ProfileError(f"Could not create profile '{profile.name}'", result.output)

        if profile.activate:
            result = self.network.connection_up(profile.name)
            if not result.ok:
                raise ProfileError(f"Could not activate profile '{profile.name}'", result.output)
