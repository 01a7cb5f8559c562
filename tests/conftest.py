"""
Pytest configuration and shared fixtures for Travel Router tests.

This module provides fakes for the external tools (NetworkManager, NordVPN,
sysctl and the address endpoint) so that the orchestration logic can be run
with controlled state-transition timing.
"""

import copy

import pytest

from travelrouter import config as router_settings
from travelrouter.external import ConnectivityProber, VpnSessionManager
from travelrouter.location import LocationOrchestrator
from travelrouter.models import ConnectivityCheckResult
from travelrouter.network import ConvergenceVerifier, NetworkManagerCLI, ProfileReplacer
from travelrouter.reporting import ProgressReporter
from travelrouter.utils import CommandResult

OK = CommandResult(0)
BAD_SECRETS = "Error: Connection activation failed: Secrets were required, but not provided."


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with no system access")
    config.addinivalue_line("markers", "integration: end-to-end runs against fakes")


class FakeNetwork:
    """In-memory stand-in for NetworkManagerCLI."""

    is_not_found = staticmethod(NetworkManagerCLI.is_not_found)

    def __init__(self, associate_after=0, rejected_passwords=(), addresses=None):
        self.profiles = {}
        self.active = {}  # interface -> profile name
        self.associate_after = associate_after
        self.rejected_passwords = set(rejected_passwords)
        self.addresses = addresses or {}
        self.state_checks = 0
        self.calls = []

    # Queries
    def active_connections(self):
        return [(name, iface) for iface, name in self.active.items()]

    def active_connection_on(self, interface):
        return self.active.get(interface)

    def is_active(self, name, interface):
        return self.active.get(interface) == name

    def is_connected(self, interface):
        self.state_checks += 1
        return interface in self.active and self.state_checks > self.associate_after

    def interface_address(self, interface):
        return self.addresses.get(interface)

    # Mutations
    def connection_down(self, name):
        self.calls.append(("down", name))
        for iface, active_name in list(self.active.items()):
            if active_name == name:
                del self.active[iface]
        return OK

    def connection_delete(self, name):
        self.calls.append(("delete", name))
        if name not in self.profiles:
            return CommandResult(10, "", f"Error: unknown connection '{name}'.")
        self.connection_down(name)
        del self.profiles[name]
        return OK

    def connection_add(self, name, interface, settings):
        self.calls.append(("add", name))
        self.profiles[name] = dict(settings, interface=interface)
        return OK

    def connection_modify(self, name, settings):
        self.calls.append(("modify", name))
        self.profiles[name].update(settings)
        return OK

    def connection_up(self, name):
        self.calls.append(("up", name))
        if name not in self.profiles:
            return CommandResult(10, "", f"Error: unknown connection '{name}'.")
        self.active[self.profiles[name]["interface"]] = name
        return OK

    def wifi_connect(self, ssid, password, interface, name):
        self.calls.append(("wifi-connect", name))
        if password in self.rejected_passwords:
            return CommandResult(4, "", BAD_SECRETS)
        self.profiles[name] = {"ssid": ssid, "password": password, "interface": interface}
        self.active[interface] = name
        return OK


class FakeVpnClient:
    """In-memory stand-in for NordVPNClient."""

    def __init__(
        self,
        region=None,
        failing_regions=(),
        fallback_ok=True,
        best_region="Germany",
        logged_in=True,
        daemon_running=True,
        kill_switch=False,
    ):
        self.region = region
        self.failing_regions = set(failing_regions)
        self.fallback_ok = fallback_ok
        self.best_region = best_region
        self.logged_in = logged_in
        self.running = daemon_running
        self.kill_switch = kill_switch
        self.calls = []

    def daemon_running(self):
        return self.running

    def start_daemon(self):
        self.calls.append(("start",))
        self.running = True
        return OK

    def is_logged_in(self):
        return self.logged_in

    def status(self):
        if self.region:
            return {"status": "Connected", "country": self.region, "ip": "185.1.2.3"}
        return {"status": "Disconnected"}

    def connect(self, region=None):
        self.calls.append(("connect", region))
        if region is None:
            if not self.fallback_ok:
                return CommandResult(1, "", "Whoops! Connection failed.")
            self.region = self.best_region
            return OK
        if region in self.failing_regions:
            return CommandResult(1, "", f"The specified server '{region}' does not exist.")
        self.region = region
        return OK

    def disconnect(self):
        self.calls.append(("disconnect",))
        self.region = None
        return OK

    def kill_switch_enabled(self):
        return self.kill_switch


class ScriptedProber(ConnectivityProber):
    """ConnectivityProber whose network call is replaced by a fixed answer."""

    def __init__(self, reachable=True, address="185.1.2.3", **kwargs):
        kwargs.setdefault("sleep", lambda seconds: None)
        super().__init__(**kwargs)
        self.reachable = reachable
        self.address = address
        self.probe_calls = 0

    def probe(self, timeout=router_settings.PROBE_STATUS_TIMEOUT):
        self.probe_calls += 1
        if self.reachable:
            return ConnectivityCheckResult(True, self.address, 0)
        return ConnectivityCheckResult(False, None, timeout)


class FakeForwarding:
    def __init__(self, enabled=True):
        self.enabled = enabled
        self.enable_calls = 0

    def is_enabled(self):
        return self.enabled

    def enable(self):
        self.enable_calls += 1
        self.enabled = True
        return True


class LineCollector:
    """Echo replacement that records what the reporter printed."""

    def __init__(self):
        self.lines = []
        self._partial = ""

    def __call__(self, message="", nl=True, err=False, color=None):
        self._partial += message
        if nl:
            self.lines.append(self._partial)
            self._partial = ""

    @property
    def text(self):
        return "\n".join(self.lines + [self._partial])


@pytest.fixture
def router_config():
    """Provide a validated configuration dictionary."""
    cfg = copy.deepcopy(router_settings.DEFAULT_CONFIG)
    cfg["router"]["ap_password"] = "travelsecret"
    cfg["vpn"]["country"] = "Netherlands"
    return cfg


@pytest.fixture
def fake_network():
    network = FakeNetwork(addresses={"wlan1": "10.20.30.40"})
    # The hotspot is normally already up when a location is configured
    network.profiles[router_settings.AP_PROFILE_NAME] = {"ssid": "travel-pi", "interface": "wlan0"}
    network.active["wlan0"] = router_settings.AP_PROFILE_NAME
    return network


@pytest.fixture
def fake_vpn_client():
    return FakeVpnClient()


@pytest.fixture
def fake_forwarding():
    return FakeForwarding()


@pytest.fixture
def collector():
    return LineCollector()


@pytest.fixture
def build_orchestrator(router_config, fake_network, fake_vpn_client, fake_forwarding, collector):
    """Factory wiring a LocationOrchestrator to the fakes."""

    def build(network=None, client=None, prober=None, forwarding=None, reporter=None):
        network = network or fake_network
        client = client or fake_vpn_client
        prober = prober or ScriptedProber(kill_switch_check=client.kill_switch_enabled)
        forwarding = forwarding or fake_forwarding
        sleep = lambda seconds: None  # noqa: E731
        return LocationOrchestrator(
            network=network,
            replacer=ProfileReplacer(network),
            prober=prober,
            vpn=VpnSessionManager(client, prober=prober, sleep=sleep),
            verifier=ConvergenceVerifier(network, forwarding, "wlan0"),
            wan_interface="wlan1",
            ap_interface="wlan0",
            ap_ssid="travel-pi",
            default_region=router_config["vpn"]["country"],
            wifi_timeout=5,
            internet_timeout=4,
            reporter=reporter or ProgressReporter(echo=collector),
            sleep=sleep,
        )

    return build


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration between tests."""
    import logging

    from travelrouter.logging_config import RouterLogger

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.WARNING)
    RouterLogger._initialized = False
    yield
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    RouterLogger._initialized = False
