"""Errors raised by the caller access registry."""

from __future__ import annotations

from homeassistant.exceptions import HomeAssistantError


class AccessRegistryError(HomeAssistantError):
    """Base error for registry failures."""


class StorageUnavailable(AccessRegistryError):
    """The storage substrate failed to load or save the registry."""


class InventoryUnavailable(AccessRegistryError):
    """The live inventory could not be listed."""


class RegistryConsistencyError(AccessRegistryError):
    """A stored record's id does not match its key."""


class RekeyCollision(AccessRegistryError):
    """A rekey targets an id that already has a different record."""


class LockedRecordError(AccessRegistryError):
    """The operation would delete or deny the locked self-record."""
