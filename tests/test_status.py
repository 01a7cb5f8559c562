"""
Unit tests for travelrouter/status.py and travelrouter/reporting.py
"""

from unittest.mock import MagicMock, patch

import pytest

from conftest import LineCollector, ScriptedProber
from travelrouter.reporting import ProgressReporter
from travelrouter.status import collect_status, get_ap_clients, get_internet_line, render_status
from travelrouter.utils import CommandResult

NEIGHBOURS = """192.168.10.23 lladdr 3c:22:fb:11:22:33 REACHABLE
192.168.10.41 lladdr a4:83:e7:44:55:66 STALE
192.168.10.77 FAILED
192.168.10.90 INCOMPLETE
"""


@pytest.mark.unit
class TestStatus:
    @patch("travelrouter.status.run_command")
    def test_ap_clients_skip_failed_entries(self, mock_run):
        mock_run.return_value = CommandResult(0, NEIGHBOURS)

        clients = get_ap_clients("wlan0")

        assert len(clients) == 2
        assert clients[0].startswith("192.168.10.23")
        assert mock_run.call_args.args[0] == ["ip", "neigh", "show", "dev", "wlan0"]

    def test_internet_line(self):
        assert get_internet_line(ScriptedProber(address="185.1.2.3")) == "Reachable, public IP: 185.1.2.3"
        assert get_internet_line(ScriptedProber(reachable=False)) == "No internet access"

    @patch("travelrouter.status.run_command")
    def test_collect_status_sections(self, mock_run):
        mock_run.return_value = CommandResult(0, "")
        network = MagicMock()
        network.device_status_table.return_value = "wlan0  wifi  connected  travel-router-ap"
        client = MagicMock()
        client.is_installed.return_value = True
        client.status_text.return_value = "Status: Connected\nCountry: Netherlands"

        sections = collect_status(network, client, ScriptedProber(), "wlan0")

        titles = [title for title, _ in sections]
        assert titles == [
            "VPN",
            "Interfaces",
            "IP Addresses",
            "Default Route",
            "Internet Check",
            "Connected AP Clients",
        ]
        assert dict(sections)["VPN"].startswith("Status: Connected")
        assert dict(sections)["Connected AP Clients"] == "None"

    @patch("travelrouter.status.run_command")
    def test_vpn_not_installed(self, mock_run):
        mock_run.return_value = CommandResult(0, "")
        client = MagicMock()
        client.is_installed.return_value = False

        sections = collect_status(MagicMock(), client, ScriptedProber(), "wlan0")

        assert dict(sections)["VPN"] == "NordVPN not installed"
        client.status_text.assert_not_called()

    def test_render_status(self):
        collector = LineCollector()

        render_status([("VPN", "Status: Connected\nCountry: Netherlands")], echo=collector)

        assert "Travel Router Status" in collector.text
        assert "  Country: Netherlands" in collector.lines


@pytest.mark.unit
class TestProgressReporter:
    def test_tagged_lines(self):
        collector = LineCollector()
        reporter = ProgressReporter(echo=collector)

        reporter.info("Connecting wlan1 to 'Hotel_Guest'...")
        reporter.ok("VPN connected (Netherlands)")

        assert "[INFO]  Connecting wlan1 to 'Hotel_Guest'..." in collector.lines[0]
        assert "[OK]    VPN connected (Netherlands)" in collector.lines[1]

    def test_progress_dots(self):
        collector = LineCollector()
        reporter = ProgressReporter(echo=collector)

        reporter.progress("Waiting for WiFi association")
        reporter.tick()
        reporter.tick()
        reporter.done()

        assert collector.lines == ["[....] Waiting for WiFi association.. done"]

    def test_warning_ends_progress_line(self):
        collector = LineCollector()
        reporter = ProgressReporter(echo=collector)

        reporter.progress("Waiting for internet connectivity")
        reporter.tick()
        reporter.warn("Internet not reachable after 20s. Continuing anyway.")

        assert collector.lines[0] == "[....] Waiting for internet connectivity."
        assert "[WARN]  Internet not reachable" in collector.lines[1]

    def test_done_without_progress_is_silent(self):
        collector = LineCollector()

        ProgressReporter(echo=collector).done()

        assert collector.lines == []
