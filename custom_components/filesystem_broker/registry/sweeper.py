"""Lifecycle sweep that ages out callers which stay uninstalled."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from homeassistant.core import callback
from homeassistant.helpers.event import async_track_point_in_time
from homeassistant.util import dt as dt_util

from ..const import EVENT_REGISTRY_SWEPT
from ..core.datetime_utils import DateTimeUtils
from ..core.error_handlers import ErrorHandler
from .models import UninstalledType

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from homeassistant.core import HomeAssistant

    from .models import AccessRecord, InventoryEntry
    from .policy import AccessRegistry

LOGGER = logging.getLogger(__name__)


@dataclass
class SweepResult:
    """Outcome of one sweep pass."""

    removed_count: int = 0
    marked_count: int = 0
    reinstated_count: int = 0
    removed_ids: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """Return True if the pass modified the registry."""
        return bool(self.removed_count or self.marked_count or self.reinstated_count)

    def as_dict(self) -> dict[str, Any]:
        """Serialize the result for events and service responses."""
        return {
            "removed_count": self.removed_count,
            "marked_count": self.marked_count,
            "reinstated_count": self.reinstated_count,
            "removed_ids": list(self.removed_ids),
        }


def sweep_records(
    records: dict[str, AccessRecord],
    installed: dict[str, InventoryEntry],
    num_days_grace: int,
    now: datetime,
) -> SweepResult:
    """
    Mark, reinstate and delete records in place.

    ``num_days_grace`` must be >= 0; the disabled case is handled by the caller
    so that nothing is touched at all. The locked self-record is skipped.
    """
    result = SweepResult()
    now_ms = DateTimeUtils.to_epoch_ms(now)
    cutoff_ms = DateTimeUtils.to_epoch_ms(
        DateTimeUtils.removal_cutoff(now, num_days_grace)
    )

    for caller_id, record in list(records.items()):
        if record.locked:
            continue
        present = caller_id in installed

        if record.uninstalled:
            if present:
                LOGGER.debug("Caller %s is installed again; reinstating.", caller_id)
                record.reinstate()
                result.reinstated_count += 1
                continue
            if record.uninstalled_time_ms is None:
                record.uninstalled_time_ms = now_ms
        elif present:
            continue
        else:
            LOGGER.debug("Caller %s is no longer installed; marking.", caller_id)
            record.mark_uninstalled(now_ms, UninstalledType.AUTO_SWEEP)
            result.marked_count += 1

        if num_days_grace == 0 or record.uninstalled_time_ms < cutoff_ms:
            LOGGER.debug(
                "Removing caller %s (uninstalled %s, cutoff %s).",
                caller_id,
                DateTimeUtils.from_epoch_ms(record.uninstalled_time_ms).isoformat(),
                DateTimeUtils.from_epoch_ms(cutoff_ms).isoformat(),
            )
            del records[caller_id]
            result.removed_count += 1
            result.removed_ids.append(caller_id)

    return result


class LifecycleSweeper:
    """Runs the registry sweep at every local midnight."""

    def __init__(
        self,
        hass: HomeAssistant,
        registry: AccessRegistry,
        num_days_getter: Callable[[], int],
    ) -> None:
        self._hass = hass
        self._registry = registry
        self._num_days_getter = num_days_getter
        self._unsub: Callable[[], None] | None = None
        self._stopped = False

    @property
    def is_scheduled(self) -> bool:
        """Return True while a midnight run is armed."""
        return self._unsub is not None

    def start(self) -> None:
        """Arm the next midnight run; a no-op when already armed."""
        self._stopped = False
        if self._unsub is not None:
            return
        self._arm()

    def stop(self) -> None:
        """Cancel the pending midnight run."""
        self._stopped = True
        if self._unsub is not None:
            self._unsub()
            self._unsub = None

    def reschedule(self) -> None:
        """Cancel and re-arm the midnight run."""
        self.stop()
        self._stopped = False
        self._arm()

    def _arm(self) -> None:
        when = DateTimeUtils.next_local_midnight(dt_util.now())
        self._unsub = async_track_point_in_time(
            self._hass, self._handle_midnight, when
        )
        LOGGER.info("Next caller registry sweep scheduled for %s.", when.isoformat())

    async def _handle_midnight(self, now: datetime) -> None:
        self._unsub = None
        _, err = await ErrorHandler.execute_with_standard_handling(
            self.async_run_now(now=now), "Scheduled caller registry sweep"
        )
        if err is not None:
            LOGGER.warning("Registry left unchanged after failed sweep.")
        if self._stopped:
            LOGGER.debug("Sweeper stopped during the run; not re-arming.")
            return
        self.start()

    async def async_run_now(
        self, num_days: int | None = None, now: datetime | None = None
    ) -> SweepResult:
        """Run a sweep immediately with the configured or given grace days."""
        days = self._num_days_getter() if num_days is None else num_days
        result = await self._registry.async_sweep(days, now=now)
        self._fire_swept(days, result)
        return result

    @callback
    def _fire_swept(self, num_days: int, result: SweepResult) -> None:
        self._hass.bus.async_fire(
            EVENT_REGISTRY_SWEPT, {"num_days": num_days, **result.as_dict()}
        )
