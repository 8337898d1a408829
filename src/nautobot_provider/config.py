"""Provider configuration resolution.

Merges the host-supplied ``url``/``token`` attributes with the
``NAUTOBOT_URL``/``NAUTOBOT_TOKEN`` environment variables.  Every problem
found in a pass is reported at once so users can fix several
misconfigurations in one cycle.  Token values are never logged or copied
into diagnostics.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib.parse import urlparse

import httpx

from nautobot_provider.attributes import AttrKind, AttributeValue
from nautobot_provider.diagnostics import AttributePath, Diagnostics

logger = logging.getLogger(__name__)

URL_ENV = "NAUTOBOT_URL"
TOKEN_ENV = "NAUTOBOT_TOKEN"

# Diagnostic codes
UNKNOWN_URL = "UnknownUrl"
UNKNOWN_TOKEN = "UnknownToken"
MISSING_URL = "MissingUrl"
MISSING_TOKEN = "MissingToken"
INVALID_URL = "InvalidUrl"

_URL_SUMMARY = "Nautobot URL was not provided."
_TOKEN_SUMMARY = "Nautobot Token was not provided."


def _detail(what: str, env_var: str) -> str:
    return (
        f"The provider cannot create the Nautobot API client as there is an unknown "
        f"or empty configuration value for the Nautobot {what}. Either target apply "
        f"the source of the value first, set the value statically in the configuration, "
        f"or use the {env_var} environment variable."
    )


def _is_valid_url(url: str) -> bool:
    """True for an absolute http(s) URL that both urllib and httpx can parse."""
    try:
        parsed = urlparse(url)
        parsed.port
        httpx.URL(url)
    except (ValueError, httpx.InvalidURL):
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)


@dataclass(frozen=True)
class HostConfig:
    """Provider block as delivered by the host: each field may be null/unknown/known."""

    url: AttributeValue = field(default_factory=lambda: AttributeValue.null(AttrKind.STRING))
    token: AttributeValue = field(default_factory=lambda: AttributeValue.null(AttrKind.STRING))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "HostConfig":
        """Build from a plain mapping; missing keys and ``None`` become null."""
        data = data or {}

        def _attr(key: str) -> AttributeValue:
            value = data.get(key)
            if value is None:
                return AttributeValue.null(AttrKind.STRING)
            return AttributeValue.string(str(value))

        return cls(url=_attr("url"), token=_attr("token"))


@dataclass(frozen=True)
class ClientConfig:
    base_url: str
    token: str = field(repr=False)


def resolve_client_config(
    config: HostConfig,
    environ: Mapping[str, str] | None = None,
) -> tuple[ClientConfig | None, Diagnostics]:
    """Resolve *config* against the environment.

    Returns ``(client_config, diagnostics)``; ``client_config`` is ``None``
    whenever an error diagnostic was produced.
    """
    env = os.environ if environ is None else environ
    diags = Diagnostics()
    url_path = AttributePath.root("url")
    token_path = AttributePath.root("token")

    if config.url.is_unknown:
        diags.add_attribute_error(url_path, _URL_SUMMARY, _detail("API host", URL_ENV), code=UNKNOWN_URL)
    if config.token.is_unknown:
        diags.add_attribute_error(token_path, _TOKEN_SUMMARY, _detail("token", TOKEN_ENV), code=UNKNOWN_TOKEN)
    if diags.has_error():
        return None, diags

    url = env.get(URL_ENV, "") if config.url.is_null else config.url.value_string()
    token = env.get(TOKEN_ENV, "") if config.token.is_null else config.token.value_string()

    if not url:
        diags.add_attribute_error(url_path, _URL_SUMMARY, _detail("API host", URL_ENV), code=MISSING_URL)
    if not token:
        diags.add_attribute_error(token_path, _TOKEN_SUMMARY, _detail("token", TOKEN_ENV), code=MISSING_TOKEN)
    if diags.has_error():
        return None, diags

    if not _is_valid_url(url):
        diags.add_attribute_error(
            url_path,
            "Nautobot URL is invalid.",
            f"Expected an absolute http(s) URL such as https://nautobot.example.com, got {url!r}.",
            code=INVALID_URL,
        )
        return None, diags

    logger.debug("Resolved Nautobot URL %s", url)
    return ClientConfig(base_url=url.rstrip("/"), token=token), diags
