"""Persistent store for the caller access registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.storage import Store

from ..const import STORE_KEY, STORE_VERSION
from .exceptions import RegistryConsistencyError, StorageUnavailable
from .models import AccessRecord

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

LOGGER = logging.getLogger(__name__)


class RegistryStore:
    """Persist the whole caller map under a single storage key."""

    def __init__(self, hass: HomeAssistant, key: str = STORE_KEY) -> None:
        self._store: Store[dict[str, Any]] = Store(hass, STORE_VERSION, key)

    async def async_load(
        self, *, setting_defaults: bool = False
    ) -> dict[str, AccessRecord]:
        """
        Load every record.

        An empty map is returned when nothing has been stored yet. That case
        is logged as an error unless defaults are being seeded.
        """
        try:
            data = await self._store.async_load()
        except (HomeAssistantError, OSError, ValueError) as err:
            msg = f"Failed to load caller registry: {err}"
            raise StorageUnavailable(msg) from err

        if data is None:
            if not setting_defaults:
                LOGGER.error("No caller registry found in storage.")
            return {}
        if not isinstance(data, dict):
            msg = f"Stored caller registry is not a mapping: {type(data).__name__}"
            raise StorageUnavailable(msg)

        records: dict[str, AccessRecord] = {}
        for caller_id, raw in data.items():
            if not isinstance(raw, dict):
                msg = f"Stored record for {caller_id!r} is not a mapping"
                raise RegistryConsistencyError(msg)
            record = AccessRecord.from_dict({"id": caller_id, **raw})
            if record.id != caller_id:
                msg = f"Stored record id {record.id!r} does not match key {caller_id!r}"
                raise RegistryConsistencyError(msg)
            records[caller_id] = record
        return records

    async def async_save(self, records: dict[str, AccessRecord]) -> None:
        """Replace the stored map."""
        for caller_id, record in records.items():
            if record.id != caller_id:
                msg = f"Record id {record.id!r} does not match key {caller_id!r}"
                raise RegistryConsistencyError(msg)
        payload = {caller_id: record.as_dict() for caller_id, record in records.items()}
        try:
            await self._store.async_save(payload)
        except (HomeAssistantError, OSError, ValueError) as err:
            msg = f"Failed to save caller registry: {err}"
            raise StorageUnavailable(msg) from err

    async def async_clear(self) -> None:
        """Remove the stored map."""
        try:
            await self._store.async_remove()
        except (HomeAssistantError, OSError) as err:
            msg = f"Failed to clear caller registry: {err}"
            raise StorageUnavailable(msg) from err
