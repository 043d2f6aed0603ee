from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from placement.domain.shared.error import ConfigurationError
from placement.domain.shared.port.clock import Clock


class SystemClock(Clock):
    """Wall clock. ``today`` is the calendar date in the configured zone."""

    def __init__(self, timezone: str = "UTC") -> None:
        try:
            self._zone = ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(f"Unknown timezone in lifecycle.timezone: {timezone!r}") from e

    def now(self) -> datetime:
        return datetime.now(UTC)

    def today(self) -> date:
        return datetime.now(self._zone).date()
