"""Access policy operations over the reconciled caller registry."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from homeassistant.util import dt as dt_util

from ..const import SORT_BY_NAME
from ..core.datetime_utils import DateTimeUtils
from .exceptions import LockedRecordError, RekeyCollision
from .inventory import index_inventory
from .models import AccessRecord, UninstalledType
from .reconciler import reconcile
from .sweeper import SweepResult, sweep_records

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from .inventory import InventoryProvider
    from .models import InventoryEntry
    from .store import RegistryStore

LOGGER = logging.getLogger(__name__)


def _valid_id(caller_id: object) -> bool:
    return isinstance(caller_id, str) and len(caller_id) > 0


def _snapshot(records: dict[str, AccessRecord]) -> dict[str, AccessRecord]:
    return {caller_id: record.copy() for caller_id, record in records.items()}


class AccessRegistry:
    """
    Durable caller -> access record map kept consistent with the inventory.

    Every mutation runs load -> reconcile -> mutate -> save under one lock so
    concurrent callers never lose each other's writes. ``is_allow_access``
    answers from the last persisted snapshot without waiting on the lock.
    """

    def __init__(self, store: RegistryStore, inventory: InventoryProvider) -> None:
        self._store = store
        self._inventory = inventory
        self._lock = asyncio.Lock()
        self._snapshot: dict[str, AccessRecord] = {}

    # ---- read path ----

    async def _async_read(
        self, *, setting_defaults: bool = False
    ) -> tuple[dict[str, AccessRecord], dict[str, InventoryEntry]]:
        """Load and reconcile; inventory failures propagate."""
        records = await self._store.async_load(setting_defaults=setting_defaults)
        inventory = await self._inventory.async_list_installed()
        reconcile(records, inventory)
        self._snapshot = _snapshot(records)
        return records, index_inventory(inventory)

    async def _async_commit(self, records: dict[str, AccessRecord]) -> None:
        """Persist, then publish the new snapshot."""
        await self._store.async_save(records)
        self._snapshot = _snapshot(records)

    def is_allow_access(self, caller_id: str) -> bool:
        """Return the access decision for a caller; False when unknown."""
        if not _valid_id(caller_id):
            return False
        record = self._snapshot.get(caller_id)
        if record is None:
            return False
        return record.allow_access

    def has_record(self, caller_id: str) -> bool:
        """Return True if the snapshot holds a record for caller_id."""
        return caller_id in self._snapshot

    async def async_refresh(self) -> None:
        """Reload the snapshot from storage and the inventory."""
        async with self._lock:
            await self._async_read()

    async def async_get_record(self, caller_id: str) -> AccessRecord | None:
        """Return a reconciled copy of one record."""
        if not _valid_id(caller_id):
            return None
        async with self._lock:
            records, _ = await self._async_read()
        record = records.get(caller_id)
        return record.copy() if record is not None else None

    async def async_list_records(self, sort_by: str = "id") -> list[AccessRecord]:
        """Return reconciled records sorted case-insensitively by id or name."""
        async with self._lock:
            records, _ = await self._async_read()
        if sort_by == SORT_BY_NAME:
            return sorted(records.values(), key=lambda r: (r.name.lower(), r.id))
        return sorted(records.values(), key=lambda r: r.id.lower())

    # ---- defaults ----

    async def _async_seed_defaults(
        self, self_id: str, self_name: str, version: str
    ) -> AccessRecord:
        """Insert the locked self-record if missing; the caller holds the lock."""
        records, _ = await self._async_read(setting_defaults=True)
        record = records.get(self_id)
        if record is not None:
            return record.copy()
        record = AccessRecord(
            id=self_id,
            name=self_name,
            allow_access=True,
            short_name=self_id,
            version=version,
            version_name=version,
            installed=True,
            locked=True,
        )
        records[self_id] = record
        await self._async_commit(records)
        LOGGER.info("Seeded locked self-record for %s.", self_id)
        return record.copy()

    async def async_setup_defaults(
        self, self_id: str, self_name: str, version: str
    ) -> AccessRecord:
        """Ensure the locked self-record exists."""
        async with self._lock:
            return await self._async_seed_defaults(self_id, self_name, version)

    async def async_reset(self, self_id: str, self_name: str, version: str) -> None:
        """Clear the registry and re-seed the self-record."""
        async with self._lock:
            await self._store.async_clear()
            self._snapshot = {}
            LOGGER.warning("Caller registry cleared.")
            await self._async_seed_defaults(self_id, self_name, version)

    # ---- single caller ----

    async def _async_set_access(self, caller_id: str, *, allow: bool) -> bool:
        if not _valid_id(caller_id):
            return False
        async with self._lock:
            records, installed = await self._async_read()
            record = records.get(caller_id)
            if record is not None:
                if record.locked and not allow:
                    msg = f"Caller {caller_id} is locked and cannot be denied"
                    raise LockedRecordError(msg)
                record.allow_access = allow
            else:
                entry = installed.get(caller_id)
                if entry is None:
                    LOGGER.warning(
                        "Cannot set access for unknown caller %s: not installed.",
                        caller_id,
                    )
                    return False
                records[caller_id] = AccessRecord.from_inventory(
                    entry, allow_access=allow
                )
            await self._async_commit(records)
        LOGGER.debug("Set allow_access=%s for %s.", allow, caller_id)
        return True

    async def async_allow_access(self, caller_id: str) -> bool:
        """Grant access to one caller; False if it is neither known nor installed."""
        return await self._async_set_access(caller_id, allow=True)

    async def async_disallow_access(self, caller_id: str) -> bool:
        """Deny access to one caller; False if it is neither known nor installed."""
        return await self._async_set_access(caller_id, allow=False)

    # ---- bulk ----

    async def _async_set_access_many(
        self, caller_ids: Iterable[str] | None, *, allow: bool
    ) -> int:
        async with self._lock:
            records, _ = await self._async_read()
            if caller_ids is None:
                targets = list(records.values())
            else:
                targets = [
                    records[c] for c in dict.fromkeys(caller_ids) if c in records
                ]
            count = 0
            for record in targets:
                if record.allow_access == allow:
                    continue
                if record.locked and not allow:
                    continue
                record.allow_access = allow
                count += 1
            if count > 0:
                await self._async_commit(records)
        LOGGER.debug("Set allow_access=%s on %s record(s).", allow, count)
        return count

    async def async_allow_access_all(self) -> int:
        """Grant access to every record; return how many changed."""
        return await self._async_set_access_many(None, allow=True)

    async def async_disallow_access_all(self) -> int:
        """Deny access to every unlocked record; return how many changed."""
        return await self._async_set_access_many(None, allow=False)

    async def async_allow_access_selected(self, caller_ids: Iterable[str]) -> int:
        """Grant access to the given known callers; return how many changed."""
        return await self._async_set_access_many(caller_ids, allow=True)

    async def async_disallow_access_selected(self, caller_ids: Iterable[str]) -> int:
        """Deny access to the given known, unlocked callers; return how many changed."""
        return await self._async_set_access_many(caller_ids, allow=False)

    # ---- upsert / delete ----

    async def async_add_or_update_caller(
        self,
        old_id: str | None,
        new_id: str,
        new_name: str,
        allow_access: bool = True,  # noqa: FBT001, FBT002
    ) -> AccessRecord:
        """
        Insert or update a record, optionally moving it to a new id.

        Raises RekeyCollision when an existing old_id record would move onto an
        id that already has a record, and LockedRecordError when the self-record would be
        moved away or denied.
        """
        if old_id is not None and not isinstance(old_id, str):
            msg = "old_id must be a string"
            raise ValueError(msg)
        if not _valid_id(new_id) or not _valid_id(new_name):
            msg = "new_id and new_name must be non-empty strings"
            raise ValueError(msg)

        async with self._lock:
            records, installed = await self._async_read()
            rekey = bool(old_id) and old_id != new_id and old_id in records
            if rekey:
                if new_id in records:
                    msg = f"Cannot rename {old_id} to {new_id}: {new_id} exists"
                    raise RekeyCollision(msg)
                if records[old_id].locked:
                    msg = f"Caller {old_id} is locked and cannot be renamed"
                    raise LockedRecordError(msg)
                del records[old_id]

            record = records.get(new_id)
            if record is None:
                record = AccessRecord(id=new_id, name=new_name)
                entry = installed.get(new_id)
                if entry is not None:
                    record.apply_inventory(entry)
                records[new_id] = record
            elif record.locked and not allow_access:
                msg = f"Caller {new_id} is locked and cannot be denied"
                raise LockedRecordError(msg)
            record.name = new_name
            record.allow_access = allow_access
            await self._async_commit(records)

        LOGGER.debug("Stored caller %s (from %s).", new_id, old_id)
        return record.copy()

    async def async_delete_caller(self, caller_id: str) -> AccessRecord | None:
        """Delete one record and return it, or None if absent."""
        if not _valid_id(caller_id):
            return None
        async with self._lock:
            records, _ = await self._async_read()
            record = records.get(caller_id)
            if record is None:
                return None
            if record.locked:
                msg = f"Caller {caller_id} is locked and cannot be deleted"
                raise LockedRecordError(msg)
            del records[caller_id]
            await self._async_commit(records)
        LOGGER.debug("Deleted caller %s.", caller_id)
        return record

    async def async_delete_selected(self, caller_ids: Iterable[str]) -> int:
        """Delete the given unlocked records; return how many were deleted."""
        async with self._lock:
            records, _ = await self._async_read()
            count = 0
            for caller_id in dict.fromkeys(caller_ids):
                record = records.get(caller_id)
                if record is None or record.locked:
                    continue
                del records[caller_id]
                count += 1
            if count > 0:
                await self._async_commit(records)
        LOGGER.debug("Deleted %s caller(s).", count)
        return count

    # ---- lifecycle ----

    async def async_sweep(
        self, num_days_grace: int, now: datetime | None = None
    ) -> SweepResult:
        """
        Mark, reinstate and age out uninstalled callers.

        A negative grace disables the sweep entirely. The registry is saved
        once at the end, so a failure leaves the persisted state untouched.
        """
        if num_days_grace < 0:
            LOGGER.debug("Auto-remove is disabled; skipping sweep.")
            return SweepResult()
        now = now or dt_util.utcnow()
        async with self._lock:
            records, installed = await self._async_read()
            result = sweep_records(records, installed, num_days_grace, now)
            if result.changed:
                await self._async_commit(records)
        LOGGER.info(
            "Sweep (num_days=%s) removed=%s marked=%s reinstated=%s.",
            num_days_grace,
            result.removed_count,
            result.marked_count,
            result.reinstated_count,
        )
        return result

    async def async_mark_uninstalled(
        self, caller_id: str, num_days_grace: int, now: datetime | None = None
    ) -> bool:
        """
        Handle an uninstall notification for one caller.

        Removes the record when the grace is 0, otherwise marks it uninstalled.
        Returns False when there is no record, it is locked, or auto-remove is
        disabled (negative grace).
        """
        if num_days_grace < 0:
            LOGGER.debug(
                "Auto-remove is disabled; ignoring uninstall of %s.", caller_id
            )
            return False
        now = now or dt_util.utcnow()
        async with self._lock:
            records, _ = await self._async_read()
            record = records.get(caller_id)
            if record is None or record.locked:
                return False
            if num_days_grace == 0:
                del records[caller_id]
                LOGGER.debug("Removed uninstalled caller %s immediately.", caller_id)
            elif not record.uninstalled:
                record.mark_uninstalled(
                    DateTimeUtils.to_epoch_ms(now), UninstalledType.UNINSTALL_EVENT
                )
                LOGGER.debug("Marked caller %s as uninstalled.", caller_id)
            else:
                return True
            await self._async_commit(records)
        return True

    async def async_handle_installed(self, caller_id: str) -> bool:
        """Cancel a pending removal for a caller that is installed again."""
        async with self._lock:
            records, installed = await self._async_read()
            record = records.get(caller_id)
            if record is None or not record.uninstalled:
                return False
            if caller_id not in installed:
                return False
            record.reinstate()
            await self._async_commit(records)
        LOGGER.debug("Caller %s installed again; pending removal cancelled.", caller_id)
        return True
