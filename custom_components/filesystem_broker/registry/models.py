"""Registry models for caller access records."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any


class UninstalledType(StrEnum):
    """Provenance of an uninstall marking."""

    AUTO_SWEEP = "auto_sweep"
    UNINSTALL_EVENT = "uninstall_event"


@dataclass(frozen=True)
class InventoryEntry:
    """A caller as currently reported by the live inventory."""

    id: str
    name: str
    short_name: str
    description: str
    version: str
    version_name: str
    enabled: bool
    type: str


@dataclass
class AccessRecord:
    """Stored authorization and lifecycle state for one caller."""

    id: str
    name: str
    allow_access: bool = False
    description: str = ""
    short_name: str = ""
    version: str = ""
    version_name: str = ""
    disabled: bool = False
    installed: bool = False
    uninstalled: bool = False
    uninstalled_time_ms: int | None = None
    uninstalled_type: UninstalledType | None = None
    locked: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AccessRecord:
        """Create a record from persisted data."""
        raw_type = data.get("uninstalled_type")
        time_ms = data.get("uninstalled_time_ms")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or data["id"]),
            allow_access=bool(data.get("allow_access", False)),
            description=str(data.get("description", "")),
            short_name=str(data.get("short_name", "")),
            version=str(data.get("version", "")),
            version_name=str(data.get("version_name", "")),
            disabled=bool(data.get("disabled", False)),
            installed=bool(data.get("installed", False)),
            uninstalled=bool(data.get("uninstalled", False)),
            uninstalled_time_ms=int(time_ms) if time_ms is not None else None,
            uninstalled_type=UninstalledType(raw_type) if raw_type else None,
            locked=bool(data.get("locked", False)),
        )

    @classmethod
    def from_inventory(cls, entry: InventoryEntry, *, allow_access: bool) -> AccessRecord:
        """Synthesize a record for an installed caller."""
        record = cls(id=entry.id, name=entry.name, allow_access=allow_access)
        record.apply_inventory(entry)
        return record

    def apply_inventory(self, entry: InventoryEntry) -> None:
        """Overwrite the inventory-derived fields; never touches name or access."""
        self.installed = True
        self.disabled = not entry.enabled
        self.description = entry.description
        self.short_name = entry.short_name
        self.version = entry.version
        self.version_name = entry.version_name

    def mark_uninstalled(self, now_ms: int, kind: UninstalledType) -> None:
        """Record the caller as uninstalled at now_ms."""
        self.installed = False
        self.uninstalled = True
        self.uninstalled_time_ms = now_ms
        self.uninstalled_type = kind

    def reinstate(self) -> None:
        """Cancel a pending removal."""
        self.uninstalled = False
        self.uninstalled_time_ms = None
        self.uninstalled_type = None

    def copy(self) -> AccessRecord:
        """Return a detached copy."""
        return replace(self)

    def as_dict(self) -> dict[str, Any]:
        """Serialize the record for storage and service responses."""
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "allow_access": self.allow_access,
            "description": self.description,
            "short_name": self.short_name,
            "version": self.version,
            "version_name": self.version_name,
            "disabled": self.disabled,
            "installed": self.installed,
            "uninstalled": self.uninstalled,
        }
        if self.uninstalled:
            data["uninstalled_time_ms"] = self.uninstalled_time_ms
            if self.uninstalled_type is not None:
                data["uninstalled_type"] = self.uninstalled_type.value
        if self.locked:
            data["locked"] = True
        return data
