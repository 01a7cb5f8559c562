import os
import signal
import sys
from pathlib import Path

import click

from . import config
from .exceptions import ConfigurationError, FatalInputError, RouterError
from .external import ConnectivityProber, NordVPNClient
from .location import LocationOrchestrator
from .logging_config import setup_logging
from .models import LocationConfigRequest
from .network import (
    IPForwarding,
    NetworkManagerCLI,
    ProfileReplacer,
    access_point_profile,
    fallback_hotspot_profile,
)
from .reporting import ProgressReporter
from .status import collect_status, render_status
from .utils import run_command

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def signal_handler(signum, frame):
    """Handle interrupt signals; whatever the last step did stays in place."""
    signal_name = signal.Signals(signum).name
    click.echo(f"\n\nReceived {signal_name}. Stopping; re-run to finish reconfiguring.", err=True)
    sys.exit(130)


signal.signal(signal.SIGINT, signal_handler)  # Ctrl+C
signal.signal(signal.SIGTERM, signal_handler)  # Termination signal


# --- Helper Functions ---


def _fail(reporter, message):
    reporter.error(message)
    sys.exit(1)


def _require_root(reporter):
    if os.geteuid() != 0:
        _fail(reporter, f"This command must be run as root: sudo {Path(sys.argv[0]).name}")


def _load_settings(reporter, config_file, require_ap_password=False):
    try:
        cfg = config.load_config(config_file)
        return config.validate_config(cfg, require_ap_password=require_ap_password)
    except (ConfigurationError, OSError) as e:
        _fail(reporter, f"Configuration problem in {config_file or config.get_config_path()}: {e}")


def _status_ap_interface(reporter, config_file):
    """AP interface for the status display; never writes or rejects the config."""
    default = config.DEFAULT_CONFIG["router"]["ap_interface"]
    try:
        cfg = config.load_config(config_file, create=False)
    except (ConfigurationError, OSError) as e:
        reporter.warn(f"Ignoring unreadable configuration, using {default}: {e}")
        return default
    return cfg["router"].get("ap_interface") or default


def _show_status(ap_interface):
    client = NordVPNClient()
    sections = collect_status(
        NetworkManagerCLI(),
        client,
        ConnectivityProber(),
        ap_interface,
    )
    render_status(sections)


def _list_countries(reporter):
    countries = NordVPNClient().countries()
    if not countries:
        _fail(reporter, "Could not list VPN countries. Is NordVPN installed and logged in?")
    for country in countries:
        click.echo(country)


config_option = click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Path to the router configuration (default: {config.CONFIG_FILE}).",
)
debug_option = click.option("--debug", is_flag=True, help="Mirror debug logging to the console.")


# --- Entry Points ---


@click.command(context_settings=CONTEXT_SETTINGS)
@click.argument("ssid", required=False)
@click.argument("password", required=False)
@click.option(
    "--country",
    metavar="<region>",
    help="VPN country (e.g. Germany, Netherlands, Japan). Overrides vpn.country for this run.",
)
@click.option("--status", "show_status", is_flag=True, help="Show current router status and exit.")
@click.option("--list-countries", is_flag=True, help="List available NordVPN countries and exit.")
@config_option
@debug_option
def configure_location(ssid, password, country, show_status, list_countries, config_file, debug):
    """
    Connect the travel router to a new venue WiFi and bring up the VPN.

    \b
    Examples:
      sudo configure-location "Hilton_Guest" "welcome123"
      sudo configure-location "Marriott_WiFi" "hotel2024" --country Netherlands
      sudo configure-location --status

    \b
    From your phone via SSH:
      ssh travelpi "sudo configure-location 'Hotel WiFi' 'pass123'"
    """
    setup_logging(debug=debug)
    reporter = ProgressReporter()

    if show_status:
        _show_status(_status_ap_interface(reporter, config_file))
        return

    if list_countries:
        _list_countries(reporter)
        return

    if not ssid:
        click.echo(click.get_current_context().get_help())
        _fail(reporter, "No arguments provided. Provide WiFi SSID and password.")

    try:
        request = LocationConfigRequest(ssid=ssid, password=password or "", vpn_region=country)
    except FatalInputError as e:
        _fail(reporter, str(e))

    _require_root(reporter)
    cfg = _load_settings(reporter, config_file)

    result = LocationOrchestrator.from_config(cfg, reporter=reporter).run(request)
    sys.exit(result.exit_code)


@click.command(context_settings=CONTEXT_SETTINGS)
@config_option
def router_status(config_file):
    """Show VPN, interface, routing, internet and AP client status."""
    setup_logging()
    _show_status(_status_ap_interface(ProgressReporter(), config_file))


class OrderedGroup(click.Group):
    """Custom Click group that preserves command order."""

    def list_commands(self, ctx):
        return list(self.commands.keys())


@click.group(cls=OrderedGroup, context_settings=CONTEXT_SETTINGS)
def cli():
    """
    Travel Router - Raspberry Pi WiFi-to-VPN router management.

    One radio runs the local hotspot, the other joins venue WiFi, and all
    client traffic leaves through NordVPN.
    """
    pass


cli.add_command(configure_location, name="location")
cli.add_command(router_status, name="status")


@cli.command()
def countries():
    """List available NordVPN countries."""
    setup_logging()
    _list_countries(ProgressReporter())


@cli.command()
@config_option
@debug_option
def ap(config_file, debug):
    """
    Recreate the hotspot profile from the configuration.

    Deletes any stored 'travel-router-ap' profile, creates it again from the
    [router] section, activates it, and makes sure IP forwarding is on.
    """
    setup_logging(debug=debug)
    reporter = ProgressReporter()
    _require_root(reporter)
    cfg = _load_settings(reporter, config_file, require_ap_password=True)
    router = cfg["router"]

    reporter.info(f"Configuring access point on {router['ap_interface']}...")
    try:
        ProfileReplacer(NetworkManagerCLI()).replace_profile(access_point_profile(router))
    except RouterError as e:
        _fail(reporter, str(e))

    forwarding = IPForwarding()
    if not forwarding.is_enabled() and not forwarding.enable():
        reporter.warn("Could not enable IP forwarding")
    reporter.ok(f"Hotspot configured: SSID='{router['ap_ssid']}', IP={router['ap_ip']}")


@cli.command("fallback-hotspot")
@click.option("--ssid", help="Phone hotspot SSID (default: fallback_hotspot.ssid).")
@click.option("--password", help="Phone hotspot password (default: fallback_hotspot.password).")
@config_option
@debug_option
def fallback_hotspot(ssid, password, config_file, debug):
    """
    Save the phone hotspot as the fallback WAN profile.

    The profile is stored with a lower autoconnect priority than the venue
    WiFi, so the Pi only joins the phone when no venue network is available.
    """
    setup_logging(debug=debug)
    reporter = ProgressReporter()
    _require_root(reporter)
    cfg = _load_settings(reporter, config_file)

    hotspot = cfg.get("fallback_hotspot", {})
    ssid = ssid or hotspot.get("ssid")
    password = password if password is not None else hotspot.get("password")
    if not ssid:
        reporter.info("fallback_hotspot.ssid not set, skipping")
        return

    wan_interface = cfg["router"]["wan_interface"]
    reporter.info("Configuring phone hotspot as fallback WAN...")
    try:
        ProfileReplacer(NetworkManagerCLI()).replace_profile(
            fallback_hotspot_profile(ssid, password, wan_interface)
        )
    except RouterError as e:
        _fail(reporter, str(e))

    reporter.ok(f"Phone hotspot profile saved (SSID: '{ssid}')")
    reporter.ok(f"{wan_interface} will auto-connect to your phone when no venue WiFi is configured")


@cli.command()
@config_option
def check(config_file):
    """
    Check the configuration and the tools the router depends on.

    Validates the config file, confirms both WiFi interfaces exist, and that
    NordVPN is installed and logged in. Nothing is changed.
    """
    setup_logging()
    reporter = ProgressReporter()
    cfg = _load_settings(reporter, config_file)
    router = cfg["router"]
    client = NordVPNClient()

    checks = [
        (f"AP interface {router['ap_interface']}",
         lambda: run_command(["ip", "link", "show", router["ap_interface"]], quiet_on_error=True).ok),
        (f"WAN interface {router['wan_interface']}",
         lambda: run_command(["ip", "link", "show", router["wan_interface"]], quiet_on_error=True).ok),
        ("NetworkManager", lambda: run_command(["nmcli", "general", "status"], quiet_on_error=True).ok),
        ("NordVPN installed", client.is_installed),
        ("NordVPN logged in", client.is_logged_in),
    ]

    all_passed = True
    for label, probe in checks:
        click.echo(f"  {label}...", nl=False)
        if probe():
            click.echo(click.style(" ✓", fg="green"))
        else:
            click.echo(click.style(" ✗", fg="red"))
            all_passed = False

    click.echo()
    if all_passed:
        reporter.ok("Router configuration and dependencies look good")
    else:
        _fail(reporter, "Some checks failed. See above.")


if __name__ == "__main__":
    cli()
