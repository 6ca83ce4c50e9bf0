"""Datetime utilities for registry timestamps and day boundaries."""

from __future__ import annotations

from datetime import datetime, timedelta

import homeassistant.util.dt as dt_util


class DateTimeUtils:
    """Centralized datetime operations for consistency."""

    @staticmethod
    def to_epoch_ms(dt: datetime) -> int:
        """
        Convert datetime to UTC epoch milliseconds.

        Args:
            dt: Timezone-aware datetime to convert

        Returns:
            Milliseconds since the Unix epoch

        """
        return int(dt_util.as_timestamp(dt) * 1000)

    @staticmethod
    def from_epoch_ms(epoch_ms: int) -> datetime:
        """Convert UTC epoch milliseconds to an aware UTC datetime."""
        return dt_util.utc_from_timestamp(epoch_ms / 1000)

    @staticmethod
    def removal_cutoff(now: datetime, num_days: int) -> datetime:
        """
        Get the start of the local day num_days whole days before now.

        Records uninstalled strictly before this instant have been absent
        through at least num_days calendar-day boundaries.

        Args:
            now: Reference time (any timezone)
            num_days: Whole days of grace (>= 0)

        Returns:
            Local midnight as an aware datetime in the configured time zone

        """
        local_day = dt_util.as_local(now).date() - timedelta(days=num_days)
        return dt_util.start_of_local_day(local_day)

    @staticmethod
    def next_local_midnight(now: datetime) -> datetime:
        """Get the start of the next local day after now."""
        tomorrow = dt_util.as_local(now).date() + timedelta(days=1)
        return dt_util.start_of_local_day(tomorrow)
