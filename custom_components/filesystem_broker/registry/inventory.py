"""Live inventory of callers known to Home Assistant."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

import async_timeout
from homeassistant.exceptions import HomeAssistantError
from homeassistant.loader import async_get_custom_components

from ..const import CALLER_TYPE, INVENTORY_TIMEOUT_SECONDS
from .exceptions import InventoryUnavailable
from .models import InventoryEntry

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant
    from homeassistant.loader import Integration

LOGGER = logging.getLogger(__name__)


class InventoryProvider(Protocol):
    """Lists every caller currently known to the host."""

    async def async_list_installed(self) -> list[InventoryEntry]:
        """Return the current inventory; raise InventoryUnavailable on failure."""
        ...


def index_inventory(entries: list[InventoryEntry]) -> dict[str, InventoryEntry]:
    """Index relevant inventory entries by caller id."""
    return {entry.id: entry for entry in entries if entry.type == CALLER_TYPE}


class HomeAssistantInventory:
    """Inventory backed by the custom integrations Home Assistant has loaded."""

    def __init__(
        self, hass: HomeAssistant, timeout: float = INVENTORY_TIMEOUT_SECONDS
    ) -> None:
        self.hass = hass
        self.timeout = timeout

    def _is_enabled(self, domain: str) -> bool:
        entries = self.hass.config_entries.async_entries(domain)
        if not entries:
            # YAML-only integrations have no entries to disable.
            return True
        return any(entry.disabled_by is None for entry in entries)

    def _to_entry(self, integration: Integration) -> InventoryEntry:
        version = str(integration.version) if integration.version else ""
        return InventoryEntry(
            id=integration.domain,
            name=integration.name,
            short_name=integration.domain,
            description=integration.documentation or "",
            version=version,
            version_name=version,
            enabled=self._is_enabled(integration.domain),
            type=CALLER_TYPE,
        )

    async def async_list_installed(self) -> list[InventoryEntry]:
        """Return every custom integration currently installed."""
        try:
            async with async_timeout.timeout(self.timeout):
                integrations = await async_get_custom_components(self.hass)
        except TimeoutError as err:
            msg = f"Listing custom integrations timed out after {self.timeout}s"
            raise InventoryUnavailable(msg) from err
        except (HomeAssistantError, OSError, ValueError) as err:
            msg = f"Failed to list custom integrations: {err}"
            raise InventoryUnavailable(msg) from err

        entries = [self._to_entry(i) for i in integrations.values()]
        LOGGER.debug("Inventory lists %s custom integration(s).", len(entries))
        return entries
