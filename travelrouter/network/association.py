"""
WAN association waiting for Travel Router.

After the venue profile is activated, NetworkManager may still be negotiating
with the access point. This module blocks until the WAN interface reports
``connected`` or the budget runs out.
"""

import time

from .. import config
from ..exceptions import WanTimeoutError
from ..logging_config import get_logger
from ..utils import poll_until

logger = get_logger(__name__)


def wait_for_association(
    network,
    interface,
    timeout=config.DEFAULT_WIFI_TIMEOUT,
    interval=config.POLL_INTERVAL,
    sleep=time.sleep,
    on_tick=None,
):
    """
    Wait for ``interface`` to reach the connected state.

    Args:
        network: Object with an ``is_connected(interface)`` method
            (NetworkManagerCLI or a test fake)
        interface: WAN interface name
        timeout: Budget in seconds
        interval: Seconds between state checks
        sleep: Sleep function (injectable for tests)
        on_tick: Progress callback invoked once per unsuccessful check

    Returns:
        Seconds elapsed before the interface associated

    Raises:
        WanTimeoutError: If the interface never reports connected
    """
    logger.debug(f"Waiting up to {timeout}s for {interface} to associate")
    result = poll_until(
        lambda: network.is_connected(interface),
        timeout=timeout,
        interval=interval,
        sleep=sleep,
        on_tick=on_tick,
    )
    if result.timed_out:
        raise WanTimeoutError(f"Timed out after {result.elapsed}s waiting for {interface} to connect")

    logger.info(f"{interface} associated after {result.elapsed}s")
    return result.elapsed
