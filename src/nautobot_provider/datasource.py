"""Typed read pipeline for list data sources.

Each data source declares a schema, borrows the shared :class:`ApiClient`
handed over at configure time, and on ``read()`` walks
``Idle → Fetching → Decoding → Lifting → Published | Failed``.  Pages are
followed through ``next`` until the upstream is exhausted; records keep the
upstream order.  Any failure leaves the read in ``Failed`` with exactly one
error diagnostic and no published state.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Mapping, Type

import httpx
from pydantic import BaseModel

from nautobot_provider.attributes import AttrKind, AttributeValue
from nautobot_provider.client import ApiClient
from nautobot_provider.diagnostics import AttributePath, Diagnostics
from nautobot_provider.errors import DecodeError, LiftError, NautobotProviderError
from nautobot_provider.lift import lift_object
from nautobot_provider.models import Manufacturer, ManufacturerListParams
from nautobot_provider.schema import (
    Attribute,
    Schema,
    int64_attribute,
    list_nested_attribute,
    map_attribute,
    string_attribute,
)

logger = logging.getLogger(__name__)


class ReadPhase(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    DECODING = "decoding"
    LIFTING = "lifting"
    PUBLISHED = "published"
    FAILED = "failed"


@dataclass
class ReadResponse:
    """Outcome of a data-source read as handed back to the host."""

    state: AttributeValue | None = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    phase: ReadPhase = ReadPhase.IDLE


class DataSource(ABC):
    """A read-only entity exposed to the host."""

    #: Appended to the provider type name, e.g. ``nautobot_manufacturers``.
    type_suffix: str = ""

    def __init__(self) -> None:
        self._client: ApiClient | None = None

    def metadata(self, provider_type_name: str) -> str:
        return f"{provider_type_name}_{self.type_suffix}"

    def configure(self, provider_data: ApiClient | None) -> None:
        """Receive the shared client exported by the provider's configure step.

        The host calls this before the provider is configured too, with no
        data; that call is a no-op.
        """
        if provider_data is None:
            return
        self._client = provider_data

    @abstractmethod
    def schema(self) -> Schema:
        ...

    @abstractmethod
    async def read(self) -> ReadResponse:
        ...


class ListDataSource(DataSource):
    """Data source publishing every record of one paginated list endpoint.

    Subclasses name the record model, the top-level list attribute and
    its nested record attributes, and issue the first-page request.

    Parameters
    ----------
    max_pages:
        Stop after this many pages.  ``None`` follows ``next`` to the end.
        Hitting the cap with pages left is reported as a warning, never
        silently.
    page_size:
        Page size requested from the upstream.  ``None`` leaves the
        upstream default in place.
    """

    record_model: Type[BaseModel]
    list_attribute: str = ""
    list_description: str = ""

    def __init__(self, *, max_pages: int | None = None, page_size: int | None = None) -> None:
        super().__init__()
        if max_pages is not None and max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        self.max_pages = max_pages
        self.page_size = page_size

    @abstractmethod
    def record_attributes(self) -> Mapping[str, Attribute]:
        ...

    @abstractmethod
    async def fetch_first_page(self, client: ApiClient) -> httpx.Response:
        ...

    def schema(self) -> Schema:
        return Schema(
            attributes={
                self.list_attribute: list_nested_attribute(
                    self.record_attributes(), self.list_description, computed=True
                ),
            }
        )

    async def read(self) -> ReadResponse:
        resp = ReadResponse()
        what = self.list_attribute
        if self._client is None:
            resp.phase = ReadPhase.FAILED
            resp.diagnostics.add_error(
                "Unconfigured data source",
                "Expected a configured Nautobot API client. Configure the provider first.",
                code="Unconfigured",
            )
            return resp

        attributes = self.record_attributes()
        root = AttributePath.root(what)
        items: list[AttributeValue] = []
        next_url: str | None = None
        fetched: set[str] = set()
        pages = 0
        logger.info("Reading %s from %s", what, self._client.base_url)

        while True:
            resp.phase = ReadPhase.FETCHING
            try:
                if next_url is None:
                    response = await self.fetch_first_page(self._client)
                else:
                    response = await self._client.fetch(next_url)
            except NautobotProviderError as exc:
                return self._fail(resp, f"failed to get {what} list", str(exc), type(exc).__name__)
            fetched.update(u for u in (next_url, str(response.url)) if u)

            resp.phase = ReadPhase.DECODING
            try:
                page = self._client.decode_page(response.content, self.record_model)
            except DecodeError as exc:
                return self._fail(resp, "Failed to serialize", str(exc), "DecodeError")

            resp.phase = ReadPhase.LIFTING
            try:
                for record in page.results:
                    items.append(
                        lift_object(record.model_dump(), attributes, root.index(len(items)))
                    )
            except LiftError as exc:
                return self._fail(resp, f"Failed to map {what}", str(exc), "LiftError")

            pages += 1
            logger.debug("%s page %d: %d records (count=%d)", what, pages, len(page.results), page.count)
            next_url = page.next
            if page.exhausted:
                break
            if next_url in fetched:
                return self._fail(
                    resp,
                    f"failed to get {what} list",
                    f"Pagination loop: next link {next_url} was already fetched.",
                    "PaginationLoop",
                )
            if self.max_pages is not None and pages >= self.max_pages:
                logger.warning("Page cap %d reached for %s; %d of %d records read", pages, what, len(items), page.count)
                resp.diagnostics.add_warning(
                    f"{what} list truncated",
                    f"Stopped after {pages} page(s) with {len(items)} of {page.count} records; "
                    f"raise max_pages to read everything.",
                    code="Truncated",
                )
                break

        resp.state = AttributeValue.object_({what: AttributeValue.list_(items)})
        resp.phase = ReadPhase.PUBLISHED
        logger.info("Published %d %s", len(items), what)
        return resp

    @staticmethod
    def _fail(resp: ReadResponse, summary: str, detail: str, code: str) -> ReadResponse:
        resp.diagnostics.add_error(summary, detail, code=code)
        resp.state = None
        resp.phase = ReadPhase.FAILED
        return resp


class ManufacturersDataSource(ListDataSource):
    type_suffix = "manufacturers"
    record_model = Manufacturer
    list_attribute = "manufacturers"
    list_description = "Manufacturers defined in Nautobot."

    def __init__(
        self,
        *,
        params: ManufacturerListParams | None = None,
        max_pages: int | None = None,
        page_size: int | None = None,
    ) -> None:
        super().__init__(max_pages=max_pages, page_size=page_size)
        self.params = params or ManufacturerListParams()

    async def fetch_first_page(self, client: ApiClient) -> httpx.Response:
        params = self.params
        if self.page_size and params.limit is None:
            params = replace(params, limit=self.page_size)
        return await client.fetch_manufacturers(params)

    def record_attributes(self) -> Mapping[str, Attribute]:
        return {
            "id": string_attribute("Manufacturer's UUID.", computed=True, nullable=False),
            "created": string_attribute("Manufacturer's creation date.", computed=True, nullable=False),
            "last_updated": string_attribute("Manufacturer's last update.", computed=True, nullable=False),
            "display": string_attribute("Manufacturer's display name.", optional=True, computed=True),
            "name": string_attribute("Manufacturer's name.", required=True),
            "slug": string_attribute("Manufacturer's slug.", optional=True, computed=True),
            "description": string_attribute("Manufacturer's description.", optional=True),
            "notes_url": string_attribute("Notes for manufacturer.", optional=True, computed=True),
            "url": string_attribute("Manufacturer's URL.", optional=True, computed=True),
            "devicetype_count": int64_attribute("Manufacturer's device type count.", computed=True),
            "inventoryitem_count": int64_attribute("Manufacturer's inventory item count.", computed=True),
            "platform_count": int64_attribute("Manufacturer's platform count.", computed=True),
            "custom_fields": map_attribute(
                AttrKind.DYNAMIC, "Manufacturer custom fields.", optional=True, computed=True
            ),
        }
