"""Exception hierarchy raised below the host-facing boundary.

The client and lift layers raise these; the resolver and the read pipeline
turn them into :class:`~nautobot_provider.diagnostics.Diagnostic` entries.
None of the messages ever include the API token.
"""

from __future__ import annotations

_BODY_PREVIEW = 512


class NautobotProviderError(Exception):
    """Base class for every error the provider raises."""


class ConfigurationError(NautobotProviderError):
    """Provider configuration could not be resolved."""


class InvalidCredential(ConfigurationError):
    """Raised when a token is empty or cannot be sent as a header value."""


class TransportError(NautobotProviderError):
    """Connection, TLS, DNS or timeout failure talking to Nautobot."""


class ProtocolError(NautobotProviderError):
    """Nautobot answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str, url: str = "") -> None:
        self.status_code = status_code
        self.body = body
        self.url = url
        preview = body if len(body) <= _BODY_PREVIEW else body[:_BODY_PREVIEW] + "..."
        where = f" from GET {url}" if url else ""
        super().__init__(f"unexpected status {status_code}{where}: {preview}")


class DecodeError(NautobotProviderError):
    """Response body was not JSON or did not match the page envelope."""


class LiftError(NautobotProviderError):
    """A JSON value could not be lifted into its declared attribute."""

    def __init__(self, path: object, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")
