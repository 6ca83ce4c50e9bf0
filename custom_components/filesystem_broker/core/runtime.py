"""FileSystem Broker integration runtime data."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.config_entries import ConfigEntry

    from ..registry.policy import AccessRegistry
    from ..registry.sweeper import LifecycleSweeper


@dataclass
class FSBData:
    """FileSystem Broker integration data."""

    options: dict[str, Any]
    registry: AccessRegistry
    sweeper: LifecycleSweeper
    self_id: str
    self_name: str
    version: str
    unsubscribers: list[Callable[[], None]] = field(default_factory=list)


type FSBConfigEntry = ConfigEntry[FSBData]
