"""Host-facing Nautobot provider.

Implements the provider half of the host plugin contract: metadata,
provider schema, configure, and the registry of data sources.  Configure
resolves credentials once and exports a single immutable
:class:`ApiClient` that every data source shares.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

import httpx

from nautobot_provider.client import ApiClient, create_client
from nautobot_provider.config import HostConfig, resolve_client_config
from nautobot_provider.credential import TokenCredential
from nautobot_provider.datasource import DataSource, ManufacturersDataSource
from nautobot_provider.diagnostics import AttributePath, Diagnostics
from nautobot_provider.errors import InvalidCredential
from nautobot_provider.schema import Schema, string_attribute

logger = logging.getLogger(__name__)

TYPE_NAME = "nautobot"


@dataclass
class ConfigureResponse:
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    data_source_data: ApiClient | None = None
    resource_data: ApiClient | None = None


class NautobotProvider:
    """The ``nautobot`` provider.

    Parameters
    ----------
    environ:
        Environment consulted for ``NAUTOBOT_URL``/``NAUTOBOT_TOKEN``.
        Defaults to ``os.environ``.
    timeout:
        Per-request timeout for the exported client.
    transport:
        Optional ``httpx`` transport for the exported client.
    """

    def __init__(
        self,
        *,
        environ: Mapping[str, str] | None = None,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._environ = environ
        self._timeout = timeout
        self._transport = transport

    def metadata(self) -> str:
        return TYPE_NAME

    def schema(self) -> Schema:
        return Schema(
            attributes={
                "url": string_attribute("Nautobot API base URL.", optional=True),
                "token": string_attribute("Nautobot API token.", optional=True, sensitive=True),
            }
        )

    def configure(self, config: HostConfig) -> ConfigureResponse:
        logger.info("Configuring Nautobot provider.")
        resp = ConfigureResponse()

        client_config, diags = resolve_client_config(config, self._environ)
        resp.diagnostics.extend(diags)
        if client_config is None:
            return resp

        try:
            credential = TokenCredential(client_config.token)
        except InvalidCredential as exc:
            resp.diagnostics.add_attribute_error(
                AttributePath.root("token"),
                "Invalid Nautobot Token.",
                str(exc),
                code="InvalidCredential",
            )
            return resp

        client = create_client(
            client_config.base_url,
            credential,
            timeout=self._timeout,
            transport=self._transport,
        )
        resp.data_source_data = client
        resp.resource_data = client
        logger.info("Configured Nautobot provider for %s", client.base_url)
        return resp

    def data_sources(self) -> list[Callable[..., DataSource]]:
        return [ManufacturersDataSource]

    def resources(self) -> list[Callable[..., Any]]:
        return []

    def data_source(self, type_name: str, provider_data: ApiClient | None = None, **kwargs: Any) -> DataSource:
        """Instantiate the data source registered under *type_name* and configure it."""
        for factory in self.data_sources():
            ds = factory(**kwargs)
            if ds.metadata(TYPE_NAME) == type_name:
                ds.configure(provider_data)
                return ds
        raise KeyError(f"unknown data source: {type_name}")
