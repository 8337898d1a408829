"""Read-only HTTP client wrapper.

Wraps :mod:`httpx` and **only** permits ``GET`` and ``HEAD`` methods.
Any attempt to call ``POST``, ``PUT``, ``PATCH``, or ``DELETE`` raises
:class:`ReadOnlyViolation`.  Absolute URLs are pinned to the scheme, host
and port of ``base_url`` so that pagination links can never carry the API
token to a different server, or to the same server in plaintext.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Sequence
from urllib.parse import urlparse

import httpx

from nautobot_provider.errors import NautobotProviderError

RequestHook = Callable[[httpx.Request], Awaitable[None]]
Origin = tuple[str, str, int]

_DEFAULT_PORTS = {"http": 80, "https": 443}


class ReadOnlyViolation(NautobotProviderError):
    """Raised when a non-GET/HEAD method or an off-origin URL is attempted."""


def _origin(url: str) -> Origin:
    """Return ``(scheme, host, port)`` of *url* with the scheme's default port filled in."""
    try:
        parsed = urlparse(url)
        port = parsed.port
    except ValueError as exc:
        raise ReadOnlyViolation(f"Malformed URL {url!r}: {exc}") from exc
    scheme = parsed.scheme.lower()
    if port is None:
        port = _DEFAULT_PORTS.get(scheme, 0)
    return scheme, parsed.hostname or "", port


def _format_origin(origin: Origin) -> str:
    scheme, host, port = origin
    return f"{scheme}://{host}:{port}"


class ReadOnlyHttpClient:
    """HTTP client that only allows GET and HEAD requests.

    Parameters
    ----------
    base_url:
        Base URL relative request paths are resolved against.  Absolute
        URLs must share its scheme, host and port.
    timeout:
        Per-request timeout in seconds.
    headers:
        Default headers sent with every request.
    request_hooks:
        ``httpx`` request event hooks, e.g. a credential's ``intercept``.
    transport:
        Optional ``httpx`` transport (tests inject mock or ASGI transports).
    """

    _ALLOWED_METHODS = {"GET", "HEAD"}

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 60.0,
        headers: dict[str, str] | None = None,
        request_hooks: Sequence[RequestHook] = (),
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.origin = _origin(base_url)
        self.timeout = timeout
        self._default_headers = headers or {}
        self._request_hooks = list(request_hooks)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "ReadOnlyHttpClient":
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=self._default_headers,
            event_hooks={"request": self._request_hooks},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _check_url(self, url: str) -> None:
        origin = _origin(url)
        scheme, host, _ = origin
        if not scheme and not host:
            # Relative path, resolved against base_url by httpx.
            return
        if origin != self.origin:
            raise ReadOnlyViolation(
                f"URL origin {_format_origin(origin)} does not match "
                f"{_format_origin(self.origin)}"
            )

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Perform a GET request."""
        return await self._request("GET", url, **kwargs)

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        if method.upper() not in self._ALLOWED_METHODS:
            raise ReadOnlyViolation(
                f"Method {method} is not allowed. Only GET and HEAD are permitted."
            )
        self._check_url(url)
        if self._client is None:
            raise RuntimeError("Client not initialised. Use `async with` context manager.")
        return await self._client.request(method, url, **kwargs)
