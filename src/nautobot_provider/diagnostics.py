"""Structured diagnostics reported back to the host."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class AttributePath:
    """Location of an attribute inside a schema tree.

    Steps are attribute names (``str``) or list indexes (``int``)::

        AttributePath.root("manufacturers").index(0).attribute("name")
        # -> manufacturers[0].name
    """

    steps: tuple[str | int, ...] = ()

    @classmethod
    def root(cls, name: str) -> "AttributePath":
        return cls((name,))

    def attribute(self, name: str) -> "AttributePath":
        return AttributePath(self.steps + (name,))

    def index(self, i: int) -> "AttributePath":
        return AttributePath(self.steps + (i,))

    def key(self, k: str) -> "AttributePath":
        return AttributePath(self.steps + (f'"{k}"',))

    def __str__(self) -> str:
        out = ""
        for step in self.steps:
            if isinstance(step, int):
                out += f"[{step}]"
            elif step.startswith('"'):
                out += f"[{step}]"
            else:
                out += f".{step}" if out else step
        return out


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    summary: str
    detail: str = ""
    path: AttributePath | None = None
    code: str = ""

    def to_dict(self) -> dict[str, str | None]:
        return {
            "severity": self.severity.value,
            "summary": self.summary,
            "detail": self.detail,
            "path": str(self.path) if self.path else None,
            "code": self.code,
        }

    def __str__(self) -> str:
        where = f" [{self.path}]" if self.path else ""
        return f"{self.severity.value}: {self.summary}{where}: {self.detail}"


@dataclass
class Diagnostics:
    """Accumulates diagnostics for a single host call."""

    items: list[Diagnostic] = field(default_factory=list)

    def add_error(self, summary: str, detail: str = "", *, code: str = "") -> None:
        self.items.append(Diagnostic(Severity.ERROR, summary, detail, code=code))

    def add_warning(self, summary: str, detail: str = "", *, code: str = "") -> None:
        self.items.append(Diagnostic(Severity.WARNING, summary, detail, code=code))

    def add_attribute_error(
        self, path: AttributePath, summary: str, detail: str = "", *, code: str = ""
    ) -> None:
        self.items.append(Diagnostic(Severity.ERROR, summary, detail, path=path, code=code))

    def extend(self, other: Iterable[Diagnostic]) -> None:
        self.items.extend(other)

    def has_error(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self.items)

    def errors(self) -> list[Diagnostic]:
        return [d for d in self.items if d.severity is Severity.ERROR]

    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.items if d.severity is Severity.WARNING]

    def codes(self) -> list[str]:
        return [d.code for d in self.items]

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)
