"""
NetworkManager command-line wrapper for Travel Router.

All profile and interface state lives in NetworkManager. This module is the
only place that talks to ``nmcli`` (and ``ip`` for address queries), so tests
can substitute a fake with the same methods.
"""

import re
from typing import Dict, List, Optional, Tuple

from ..logging_config import get_logger
from ..utils import CommandResult, run_command

logger = get_logger(__name__)

STATE_CONNECTED = "connected"


def split_terse_line(line: str) -> List[str]:
    """Split one line of ``nmcli -t`` output, honouring ``\\:`` escapes."""
    fields = []
    current = []
    chars = iter(line)
    for char in chars:
        if char == "\\":
            escaped = next(chars, "")
            current.append(escaped)
        elif char == ":":
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
    fields.append("".join(current))
    return fields


class NetworkManagerCLI:
    """Thin wrapper around the ``nmcli`` commands the router needs."""

    def __init__(self, nmcli="nmcli"):
        self.nmcli = nmcli

    def _run(self, *args, quiet_on_error=False) -> CommandResult:
        return run_command([self.nmcli, *args], quiet_on_error=quiet_on_error)

    # --- Queries ---

    def active_connections(self) -> List[Tuple[str, str]]:
        """Return (profile name, device) pairs for every active connection."""
        result = self._run("-t", "-f", "NAME,DEVICE", "con", "show", "--active")
        if not result.ok:
            return []
        pairs = []
        for line in result.stdout.splitlines():
            fields = split_terse_line(line)
            if len(fields) >= 2:
                pairs.append((fields[0], fields[1]))
        return pairs

    def active_connection_on(self, interface: str) -> Optional[str]:
        """Name of the profile currently active on ``interface``, if any."""
        for name, device in self.active_connections():
            if device == interface:
                return name
        return None

    def is_active(self, name: str, interface: str) -> bool:
        return (name, interface) in self.active_connections()

    def device_states(self) -> Dict[str, str]:
        """Map of device name to NetworkManager state string."""
        result = self._run("-t", "-f", "DEVICE,STATE", "dev")
        states = {}
        if result.ok:
            for line in result.stdout.splitlines():
                fields = split_terse_line(line)
                if len(fields) >= 2:
                    states[fields[0]] = fields[1]
        return states

    def device_state(self, interface: str) -> Optional[str]:
        return self.device_states().get(interface)

    def is_connected(self, interface: str) -> bool:
        return self.device_state(interface) == STATE_CONNECTED

    def interface_address(self, interface: str) -> Optional[str]:
        """First IPv4 address on ``interface``, without prefix length."""
        result = run_command(["ip", "-4", "-o", "addr", "show", "dev", interface], quiet_on_error=True)
        if not result.ok:
            return None
        match = re.search(r"inet\s+(\d+(?:\.\d+){3})", result.stdout)
        return match.group(1) if match else None

    def device_status_table(self) -> str:
        """Human-readable ``nmcli dev status`` output for status display."""
        result = self._run("dev", "status")
        return result.output

    # --- Mutations ---

    def connection_up(self, name: str) -> CommandResult:
        logger.debug(f"Activating profile '{name}'")
        return self._run("con", "up", name)

    def connection_down(self, name: str) -> CommandResult:
        logger.debug(f"Deactivating profile '{name}'")
        return self._run("con", "down", name, quiet_on_error=True)

    def connection_delete(self, name: str) -> CommandResult:
        logger.debug(f"Deleting profile '{name}'")
        return self._run("con", "delete", name, quiet_on_error=True)

    def connection_add(self, name: str, interface: str, settings: Dict[str, str]) -> CommandResult:
        """Create a WiFi profile from a flat ``nmcli con add`` settings mapping."""
        args = ["con", "add", "type", "wifi", "ifname", interface, "con-name", name]
        for key, value in settings.items():
            args.extend([key, str(value)])
        logger.debug(f"Adding profile '{name}' on {interface}")
        return self._run(*args)

    def connection_modify(self, name: str, settings: Dict[str, str]) -> CommandResult:
        args = ["con", "modify", name]
        for key, value in settings.items():
            args.extend([key, str(value)])
        return self._run(*args)

    def wifi_connect(self, ssid: str, password: str, interface: str, name: str) -> CommandResult:
        """Create and activate a client WiFi profile in one step."""
        logger.debug(f"Connecting {interface} to '{ssid}' as profile '{name}'")
        return self._run(
            "dev", "wifi", "connect", ssid,
            "password", password,
            "ifname", interface,
            "name", name,
        )

    @staticmethod
    def is_not_found(result: CommandResult) -> bool:
        """True if a failed command only reported a missing profile."""
        text = result.output.lower()
        return "unknown connection" in text or "not found" in text or "cannot find" in text
