"""Merge the live inventory into stored caller records."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .inventory import index_inventory

if TYPE_CHECKING:
    from .models import AccessRecord, InventoryEntry

LOGGER = logging.getLogger(__name__)


def reconcile(
    records: dict[str, AccessRecord], inventory: list[InventoryEntry]
) -> dict[str, AccessRecord]:
    """
    Refresh derived fields of every stored record the inventory reports.

    Name and access decisions are never touched. Callers without a record are
    not created here, and records absent from the inventory are left as-is;
    marking those is the sweep's job. Mutates and returns ``records``.
    """
    installed = index_inventory(inventory)
    for caller_id, entry in installed.items():
        record = records.get(caller_id)
        if record is None:
            continue
        record.apply_inventory(entry)
    LOGGER.debug(
        "Reconciled %s record(s) against %s installed caller(s).",
        len(records),
        len(installed),
    )
    return records
