"""Error and warning types for Travel Router."""

from typing import Optional


class RouterError(Exception):
    """Base class for fatal errors raised while reconfiguring the router."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        # Verbatim output of the underlying tool, if any
        self.detail = detail

    def __str__(self):
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class ConfigurationError(RouterError):
    """Router configuration is missing or inconsistent."""


class FatalInputError(RouterError):
    """A required argument is empty or missing."""


class WanTimeoutError(RouterError, TimeoutError):
    """The WAN interface never reached the connected state."""


class CredentialError(RouterError):
    """The WiFi association tool rejected the venue network connection."""


class ProfileError(RouterError):
    """NetworkManager refused a profile operation for a non-credential reason."""


class VpnAuthError(RouterError):
    """The VPN daemon has no authenticated session."""


class VpnConnectError(RouterError):
    """Both the requested region and the fallback server failed."""


class RouterWarning(Warning):
    """Base class for non-fatal conditions collected during a run."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class DegradedInternetWarning(RouterWarning):
    """Internet was not reachable after the WAN came up."""


class ApDownWarning(RouterWarning):
    """The access point profile was down and has been restarted."""


class ForwardingResetWarning(RouterWarning):
    """IP forwarding had been disabled and has been re-enabled."""
