"""
Internet reachability probing for Travel Router.

This module checks for internet access by asking a plain-text
"what is my address" endpoint for our public IP.
"""

import http.client
import ipaddress
import time
import urllib.error
import urllib.request

from .. import config
from ..logging_config import get_logger
from ..models import ConnectivityCheckResult, InternetWaitResult, ProbeOutcome
from ..utils import poll_until

logger = get_logger(__name__)


def parse_address(body):
    """Return ``body`` if it is a bare IP address, else None."""
    try:
        return str(ipaddress.ip_address(body))
    except ValueError:
        return None


class ConnectivityProber:
    """Bounded-timeout reachability checks against a fixed endpoint."""

    def __init__(
        self,
        url=config.CHECKIP_URL,
        kill_switch_check=None,
        skip_on_kill_switch=True,
        sleep=time.sleep,
        clock=time.monotonic,
    ):
        """
        Args:
            url: Endpoint that answers with the caller's public IP as text
            kill_switch_check: Zero-argument callable returning True when the
                VPN kill switch is blocking traffic
            skip_on_kill_switch: Whether an active kill switch skips waiting
            sleep: Sleep function (injectable for tests)
            clock: Monotonic clock (injectable for tests)
        """
        self.url = url
        self.kill_switch_check = kill_switch_check
        self.skip_on_kill_switch = skip_on_kill_switch
        self.sleep = sleep
        self.clock = clock

    def probe(self, timeout=config.PROBE_STATUS_TIMEOUT) -> ConnectivityCheckResult:
        """
        Issue one request to the address endpoint.

        Any network error or timeout is reported as unreachable, never raised.
        An HTTP error status still means the network path works, so it counts
        as reachable with no observed address.
        """
        started = self.clock()
        try:
            request = urllib.request.Request(self.url)
            request.add_header("User-Agent", "TravelRouter/1.0")
            opener = urllib.request.build_opener()

            with opener.open(request, timeout=timeout) as response:
                body = response.read().decode("utf-8", errors="replace").strip()

            address = parse_address(body)
            logger.debug(f"Reachability probe succeeded, public address {address or 'unparsed'}")
            return ConnectivityCheckResult(
                reachable=True,
                observed_address=address,
                elapsed_seconds=int(self.clock() - started),
            )
        except urllib.error.HTTPError as e:
            logger.debug(f"Reachability probe got HTTP {e.code}")
            return ConnectivityCheckResult(reachable=True, elapsed_seconds=int(self.clock() - started))
        except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as e:
            # socket.timeout and ConnectionError are OSError subclasses
            logger.debug(f"Reachability probe failed: {e}")
            return ConnectivityCheckResult(reachable=False, elapsed_seconds=int(self.clock() - started))

    def kill_switch_active(self) -> bool:
        if not self.skip_on_kill_switch or self.kill_switch_check is None:
            return False
        return bool(self.kill_switch_check())

    def wait_for_internet(
        self,
        timeout=config.DEFAULT_INTERNET_TIMEOUT,
        interval=config.POLL_INTERVAL,
        attempt_timeout=config.PROBE_ATTEMPT_TIMEOUT,
        on_start=None,
        on_tick=None,
    ) -> InternetWaitResult:
        """
        Poll the endpoint once per tick until it answers or ``timeout`` passes.

        When the VPN kill switch is enabled every probe would block until its
        own timeout, so the wait is skipped and SKIPPED is returned without
        making a request. ``on_start`` is called only when polling begins.
        """
        if self.kill_switch_active():
            logger.info("Skipping internet check, VPN kill switch is active")
            return InternetWaitResult(ProbeOutcome.SKIPPED)

        if on_start:
            on_start()

        last = []

        def reachable():
            result = self.probe(attempt_timeout)
            last.append(result)
            return result.reachable

        poll = poll_until(reachable, timeout=timeout, interval=interval, sleep=self.sleep, on_tick=on_tick)
        if poll.timed_out:
            logger.info(f"Internet not reachable after {poll.elapsed}s")
            return InternetWaitResult(ProbeOutcome.TIMED_OUT, poll.elapsed, poll.attempts)

        return InternetWaitResult(
            ProbeOutcome.REACHABLE,
            poll.elapsed,
            poll.attempts,
            observed_address=last[-1].observed_address,
        )
