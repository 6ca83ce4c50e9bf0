# ruff: noqa: S101
"""Tests for merging the live inventory into stored records."""

from __future__ import annotations

from custom_components.filesystem_broker.registry.models import (
    AccessRecord,
    InventoryEntry,
    UninstalledType,
)
from custom_components.filesystem_broker.registry.reconciler import reconcile


def _entry(
    caller_id: str,
    *,
    enabled: bool = True,
    version: str = "2.0.0",
    kind: str = "custom_integration",
) -> InventoryEntry:
    return InventoryEntry(
        id=caller_id,
        name=f"Inventory {caller_id}",
        short_name=caller_id,
        description=f"{caller_id} docs",
        version=version,
        version_name=version,
        enabled=enabled,
        type=kind,
    )


def test_installed_records_get_derived_fields() -> None:
    records = {"ext_a": AccessRecord(id="ext_a", name="Label", allow_access=True)}

    reconcile(records, [_entry("ext_a", enabled=False)])

    record = records["ext_a"]
    assert record.installed is True
    assert record.disabled is True
    assert record.version == "2.0.0"
    assert record.short_name == "ext_a"
    assert record.name == "Label"
    assert record.allow_access is True


def test_unrecorded_callers_are_not_created() -> None:
    records: dict[str, AccessRecord] = {}

    reconcile(records, [_entry("ext_new")])

    assert records == {}


def test_absent_records_are_left_alone() -> None:
    record = AccessRecord(id="ext_gone", name="Gone", installed=True)
    record.mark_uninstalled(5, UninstalledType.AUTO_SWEEP)
    before = record.copy()
    records = {"ext_gone": record}

    reconcile(records, [_entry("ext_other")])

    assert records["ext_gone"] == before


def test_irrelevant_inventory_kinds_are_ignored() -> None:
    records = {"theme": AccessRecord(id="theme", name="Theme")}

    reconcile(records, [_entry("theme", kind="theme")])

    assert records["theme"].installed is False
    assert records["theme"].version == ""


def test_reconcile_does_not_clear_uninstall_marking() -> None:
    record = AccessRecord(id="ext_a", name="A")
    record.mark_uninstalled(5, UninstalledType.AUTO_SWEEP)
    records = {"ext_a": record}

    reconcile(records, [_entry("ext_a")])

    assert records["ext_a"].installed is True
    assert records["ext_a"].uninstalled is True
    assert records["ext_a"].uninstalled_time_ms == 5
