"""
IP forwarding control for Travel Router.

AP clients are routed through the Pi, so ``net.ipv4.ip_forward`` must stay
enabled. The VPN daemon and system updates occasionally reset it.
"""

from ..logging_config import get_logger
from ..utils import run_command

logger = get_logger(__name__)

IP_FORWARD_KEY = "net.ipv4.ip_forward"


class IPForwarding:
    """Query and set the kernel IPv4 forwarding flag via ``sysctl``."""

    def __init__(self, key=IP_FORWARD_KEY):
        self.key = key

    def is_enabled(self) -> bool:
        result = run_command(["sysctl", "-n", self.key])
        enabled = result.ok and result.stdout.strip() == "1"
        logger.debug(f"{self.key} = {result.stdout.strip() or 'unknown'}")
        return enabled

    def enable(self) -> bool:
        logger.info(f"Enabling {self.key}")
        return run_command(["sysctl", "-w", f"{self.key}=1"]).ok
