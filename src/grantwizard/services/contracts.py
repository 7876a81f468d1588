"""Service contracts consumed by the grant workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from grantwizard.config import ConnectionConfig
from grantwizard.models import CapabilityCatalog, DatabaseObject, PrivilegeGrantRow


@runtime_checkable
class GrantService(Protocol):
    """Remote side of the grant wizard: catalogs, statement preview and execution.

    Implementations raise grantwizard.domain.errors subclasses on failure.
    """

    async def load_capability_catalog(self, config: ConnectionConfig) -> CapabilityCatalog: ...

    async def load_object_catalog(self, config: ConnectionConfig) -> list[DatabaseObject]: ...

    async def preview_statements(
        self,
        config: ConnectionConfig,
        objects: list[DatabaseObject],
        rows: list[PrivilegeGrantRow],
    ) -> str: ...

    async def apply_grants(
        self,
        config: ConnectionConfig,
        objects: list[DatabaseObject],
        rows: list[PrivilegeGrantRow],
    ) -> None: ...


@runtime_checkable
class Notifier(Protocol):
    """User-facing notification channel."""

    def info(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


@dataclass(slots=True)
class Notice:
    level: str
    message: str


@dataclass(slots=True)
class RecordingNotifier:
    """Notifier that keeps every notice in memory."""

    notices: list[Notice] = field(default_factory=list)

    def info(self, message: str) -> None:
        self.notices.append(Notice("info", message))

    def warning(self, message: str) -> None:
        self.notices.append(Notice("warning", message))

    def error(self, message: str) -> None:
        self.notices.append(Notice("error", message))

    def messages(self, level: str | None = None) -> list[str]:
        return [n.message for n in self.notices if level is None or n.level == level]
