"""Wire models for the Nautobot REST API.

These mirror the shapes Nautobot returns from its list endpoints.  Validation is
strict: a count sent as ``"5"`` is a decode error, not a coerced ``5``.  Every
scalar on a record may be JSON ``null``; the lift layer decides what a null
means for each attribute, so the models keep ``None`` as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

RecordT = TypeVar("RecordT", bound=BaseModel)


class PageEnvelope(BaseModel, Generic[RecordT]):
    """Paginated list response: ``count``, ``next``, ``previous``, ``results``."""

    model_config = ConfigDict(extra="ignore", strict=True)

    count: int
    next: Optional[str] = None
    previous: Optional[str] = None
    results: list[RecordT]

    @model_validator(mode="after")
    def _results_within_count(self) -> "PageEnvelope[RecordT]":
        if len(self.results) > self.count:
            raise ValueError(
                f"page holds {len(self.results)} results but count is {self.count}"
            )
        return self

    @property
    def exhausted(self) -> bool:
        return not self.next


class Manufacturer(BaseModel):
    """A ``dcim.manufacturer`` record."""

    model_config = ConfigDict(extra="ignore", strict=True)

    id: Optional[str] = None
    created: Optional[str] = None
    last_updated: Optional[str] = None
    display: Optional[str] = None
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    notes_url: Optional[str] = None
    # Absent counts read as 0; an explicit null stays None.
    devicetype_count: Optional[int] = 0
    inventoryitem_count: Optional[int] = 0
    platform_count: Optional[int] = 0
    custom_fields: Optional[dict[str, Any]] = Field(default_factory=dict)


@dataclass(frozen=True)
class ManufacturerListParams:
    """Filters accepted by ``GET /api/dcim/manufacturers/``."""

    name: str | None = None
    slug: str | None = None
    limit: int | None = None
    offset: int | None = None

    def to_query(self) -> dict[str, str | int]:
        return {k: v for k, v in vars(self).items() if v is not None}
