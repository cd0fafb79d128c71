"""Injectable clock so lockout timing can be driven from tests."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta


class Clock(ABC):
    """Abstract clock interface.

    Card timestamps are naive local times with second precision, which is
    what the flat-file store records.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time."""
        ...


class SystemClock(Clock):
    """Production clock that returns the local wall-clock time."""

    def now(self) -> datetime:
        """Get current local time truncated to seconds."""
        return datetime.now().replace(microsecond=0)


class DeterministicClock(Clock):
    """Test clock with controlled time.

    ``now()`` returns the same value on repeated calls until ``advance()``
    or ``set_time()`` is called.
    """

    def __init__(self, fixed_time: datetime | None = None) -> None:
        self._fixed_time = fixed_time or datetime(2024, 1, 1, 12, 0, 0)
        self._offset = timedelta()

    def now(self) -> datetime:
        """Get the fixed/controlled time."""
        return self._fixed_time + self._offset

    def set_time(self, time: datetime) -> None:
        """Set the clock to a specific time."""
        self._fixed_time = time
        self._offset = timedelta()

    def advance(self, seconds: float = 0, hours: float = 0) -> None:
        """Advance the clock."""
        self._offset += timedelta(seconds=seconds, hours=hours)
