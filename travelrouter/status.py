"""
Router status aggregation for Travel Router.

Read-only: gathers the VPN session, interface states, addresses, routing,
internet reachability and AP clients for display.
"""

import click

from .logging_config import get_logger
from .utils import run_command

logger = get_logger(__name__)


def get_ap_clients(ap_interface):
    """Neighbours seen on the AP interface, excluding failed/incomplete entries."""
    result = run_command(["ip", "neigh", "show", "dev", ap_interface], quiet_on_error=True)
    if not result.ok:
        return []
    clients = []
    for line in result.stdout.splitlines():
        if not line.strip() or "FAILED" in line or "INCOMPLETE" in line:
            continue
        clients.append(line.strip())
    return clients


def get_internet_line(prober):
    check = prober.probe()
    if check.reachable:
        return f"Reachable, public IP: {check.observed_address or 'unknown'}"
    return "No internet access"


def collect_status(network, vpn_client, prober, ap_interface):
    """
    Collect the router status as an ordered list of (title, body) sections.

    Args:
        network: NetworkManagerCLI
        vpn_client: NordVPNClient
        prober: ConnectivityProber (a single best-effort probe is made)
        ap_interface: Interface the hotspot runs on
    """
    sections = []

    if vpn_client.is_installed():
        sections.append(("VPN", vpn_client.status_text() or "No status reported"))
    else:
        sections.append(("VPN", "NordVPN not installed"))

    sections.append(("Interfaces", network.device_status_table() or "Unavailable"))
    sections.append(("IP Addresses", run_command(["ip", "-4", "-br", "addr", "show"]).output or "None"))
    sections.append(("Default Route", run_command(["ip", "route", "show", "default"]).output or "None"))
    sections.append(("Internet Check", get_internet_line(prober)))

    clients = get_ap_clients(ap_interface)
    sections.append(("Connected AP Clients", "\n".join(clients) if clients else "None"))

    logger.debug(f"Collected {len(sections)} status sections")
    return sections


def render_status(sections, echo=click.echo):
    echo("")
    echo(click.style("=== Travel Router Status ===", bold=True))
    echo("")
    for title, body in sections:
        echo(click.style(f"--- {title} ---", bold=True))
        for line in body.splitlines():
            echo(f"  {line}")
        echo("")
