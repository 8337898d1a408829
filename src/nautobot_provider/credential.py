"""Token credential for the Nautobot REST API.

Nautobot authenticates with ``Authorization: Token <token>``.  The
credential is immutable once built and is shared by every data source.
"""

from __future__ import annotations

import httpx

from nautobot_provider.errors import InvalidCredential

AUTH_HEADER = "Authorization"


class TokenCredential:
    """Decorates outbound requests with the Nautobot token header."""

    __slots__ = ("_token",)

    def __init__(self, token: str) -> None:
        if not token:
            raise InvalidCredential("API token must not be empty")
        if "\n" in token or "\r" in token:
            raise InvalidCredential("API token must not contain newline characters")
        object.__setattr__(self, "_token", token)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("TokenCredential is immutable")

    @property
    def header_value(self) -> str:
        return "Token " + self._token

    def decorate(self, request: httpx.Request) -> httpx.Request:
        """Set the ``Authorization`` header on *request* and return it."""
        request.headers[AUTH_HEADER] = self.header_value
        return request

    async def intercept(self, request: httpx.Request) -> None:
        """``httpx`` request event hook form of :meth:`decorate`."""
        self.decorate(request)

    def __repr__(self) -> str:
        return "TokenCredential(token='***')"
