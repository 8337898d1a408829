"""Nautobot provider: typed, read-only data sources over the Nautobot REST API."""

from nautobot_provider.attributes import AttrKind, AttrState, AttributeValue
from nautobot_provider.client import ApiClient, create_client
from nautobot_provider.config import ClientConfig, HostConfig, resolve_client_config
from nautobot_provider.credential import TokenCredential
from nautobot_provider.datasource import (
    DataSource,
    ListDataSource,
    ManufacturersDataSource,
    ReadPhase,
    ReadResponse,
)
from nautobot_provider.diagnostics import AttributePath, Diagnostic, Diagnostics, Severity
from nautobot_provider.errors import (
    ConfigurationError,
    DecodeError,
    InvalidCredential,
    LiftError,
    NautobotProviderError,
    ProtocolError,
    TransportError,
)
from nautobot_provider.http_readonly import ReadOnlyHttpClient, ReadOnlyViolation
from nautobot_provider.models import Manufacturer, ManufacturerListParams, PageEnvelope
from nautobot_provider.provider import ConfigureResponse, NautobotProvider
from nautobot_provider.schema import Attribute, Schema

__all__ = [
    "AttrKind",
    "AttrState",
    "AttributeValue",
    "ApiClient",
    "create_client",
    "ClientConfig",
    "HostConfig",
    "resolve_client_config",
    "TokenCredential",
    "DataSource",
    "ListDataSource",
    "ManufacturersDataSource",
    "ReadPhase",
    "ReadResponse",
    "AttributePath",
    "Diagnostic",
    "Diagnostics",
    "Severity",
    "ConfigurationError",
    "DecodeError",
    "InvalidCredential",
    "LiftError",
    "NautobotProviderError",
    "ProtocolError",
    "TransportError",
    "ReadOnlyHttpClient",
    "ReadOnlyViolation",
    "Manufacturer",
    "ManufacturerListParams",
    "PageEnvelope",
    "NautobotProvider",
    "ConfigureResponse",
    "Attribute",
    "Schema",
]

__version__ = "0.1.0"
