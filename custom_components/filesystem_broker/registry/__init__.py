"""FileSystem Broker caller access registry."""

from .exceptions import (
    AccessRegistryError,
    InventoryUnavailable,
    LockedRecordError,
    RegistryConsistencyError,
    RekeyCollision,
    StorageUnavailable,
)
from .inventory import HomeAssistantInventory, InventoryProvider
from .models import AccessRecord, InventoryEntry, UninstalledType
from .policy import AccessRegistry
from .reconciler import reconcile
from .store import RegistryStore
from .sweeper import LifecycleSweeper, SweepResult, sweep_records

__all__ = [
    "AccessRecord",
    "AccessRegistry",
    "AccessRegistryError",
    "HomeAssistantInventory",
    "InventoryEntry",
    "InventoryProvider",
    "InventoryUnavailable",
    "LifecycleSweeper",
    "LockedRecordError",
    "RegistryConsistencyError",
    "RegistryStore",
    "RekeyCollision",
    "StorageUnavailable",
    "SweepResult",
    "UninstalledType",
    "reconcile",
    "sweep_records",
]
