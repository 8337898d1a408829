"""Typed Nautobot API client.

One method per upstream endpoint the provider reads.  The client is an
immutable value: it holds the base URL, the credential and transport
settings, and opens a short-lived :class:`ReadOnlyHttpClient` per call so
that it can be shared freely between concurrent reads.

Usage::

    api = create_client("https://nautobot.example.com", TokenCredential(token))
    response, page = await api.list_manufacturers(ManufacturerListParams(limit=50))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Type

import httpx
from pydantic import ValidationError

from nautobot_provider.credential import TokenCredential
from nautobot_provider.errors import DecodeError, ProtocolError, TransportError
from nautobot_provider.http_readonly import ReadOnlyHttpClient
from nautobot_provider.models import (
    Manufacturer,
    ManufacturerListParams,
    PageEnvelope,
    RecordT,
)

logger = logging.getLogger(__name__)

MANUFACTURERS_PATH = "/api/dcim/manufacturers/"


@dataclass(frozen=True)
class ApiClient:
    base_url: str
    credential: TokenCredential
    timeout: float = 60.0
    transport: httpx.AsyncBaseTransport | None = None

    def _open(self) -> ReadOnlyHttpClient:
        return ReadOnlyHttpClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Accept": "application/json"},
            request_hooks=[self.credential.intercept],
            transport=self.transport,
        )

    async def fetch(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """Issue exactly one GET and return the raw 2xx response.

        *url* is either a path relative to ``base_url`` or an absolute URL
        on the same host (a ``next`` link).
        """
        logger.debug("GET %s params=%s", url, params or {})
        try:
            async with self._open() as http:
                response = await http.get(url, params=params or None)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc
        if not response.is_success:
            raise ProtocolError(response.status_code, response.text, str(response.url))
        return response

    @staticmethod
    def decode_page(body: bytes, record_model: Type[RecordT]) -> PageEnvelope[RecordT]:
        """Decode a list response body into a typed page envelope."""
        try:
            return PageEnvelope[record_model].model_validate_json(body)
        except ValidationError as exc:
            raise DecodeError(str(exc)) from exc

    # ------------------------------------------------------------------
    # dcim.manufacturers
    # ------------------------------------------------------------------

    async def fetch_manufacturers(
        self, params: ManufacturerListParams | None = None
    ) -> httpx.Response:
        return await self.fetch(MANUFACTURERS_PATH, (params or ManufacturerListParams()).to_query())

    async def list_manufacturers(
        self, params: ManufacturerListParams | None = None
    ) -> tuple[httpx.Response, PageEnvelope[Manufacturer]]:
        response = await self.fetch_manufacturers(params)
        return response, self.decode_page(response.content, Manufacturer)


def create_client(
    base_url: str,
    credential: TokenCredential,
    *,
    timeout: float = 60.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ApiClient:
    """Build the shared :class:`ApiClient` for a configured provider."""
    return ApiClient(
        base_url=base_url.rstrip("/"),
        credential=credential,
        timeout=timeout,
        transport=transport,
    )
