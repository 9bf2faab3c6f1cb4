"""
Time abstraction layer for the algorithm host.

Provides injectable clock that can be:
- Real-time (live setup stamps issued-at / starting date from it)
- Simulated (tests pin "now" so setup output is reproducible)

Pattern stolen from: LEAN (QuantConnect)
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone, timedelta


class Clock(ABC):
    """Abstract clock interface"""

    @abstractmethod
    def now(self) -> datetime:
        """Get current time (always UTC)"""
        pass


class RealTimeClock(Clock):
    """Real-time clock for live/paper setup"""

    def now(self) -> datetime:
        """Current UTC time"""
        return datetime.now(timezone.utc)


class BacktestClock(Clock):
    """Simulated clock for backtesting and tests"""

    def __init__(self, start_time: datetime):
        """
        Args:
            start_time: Initial simulation time (must be UTC)
        """
        if start_time.tzinfo is None:
            raise ValueError("start_time must be timezone-aware (UTC)")

        self._current_time = start_time.astimezone(timezone.utc)

    def now(self) -> datetime:
        """Current simulated time"""
        return self._current_time

    def advance(self, delta: timedelta):
        """
        Advance simulated time by delta.

        Args:
            delta: Time to advance
        """
        self._current_time += delta

    def set_time(self, new_time: datetime):
        """
        Set simulated time to specific value.

        Args:
            new_time: New time (must be UTC)
        """
        if new_time.tzinfo is None:
            raise ValueError("new_time must be timezone-aware (UTC)")

        self._current_time = new_time.astimezone(timezone.utc)


class ClockFactory:
    """Factory for creating appropriate clock"""

    @staticmethod
    def create_for_mode(mode: str, **kwargs) -> Clock:
        """
        Create clock based on mode.

        Args:
            mode: 'live' or 'backtest'
            **kwargs: start_time pins a backtest clock (backtest only)

        Returns:
            RealTimeClock for live; BacktestClock when a backtest start_time
            is given, otherwise RealTimeClock

        Raises:
            ValueError: unknown mode, or start_time given for live
        """
        start_time = kwargs.get('start_time')

        if mode == 'live':
            if start_time is not None:
                raise ValueError("Live clock cannot be pinned to a start_time")
            return RealTimeClock()

        if mode == 'backtest':
            if start_time is not None:
                return BacktestClock(start_time)
            return RealTimeClock()

        raise ValueError(f"Unknown mode: {mode}")


def utc_now() -> datetime:
    """
    Canonical way to get the current UTC time as a timezone-aware datetime.
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Ensure *dt* is timezone-aware and in UTC.

    - If naive (no tzinfo): attach UTC (assumes caller meant UTC).
    - If aware but not UTC: convert to UTC.
    - If already UTC-aware: return as-is.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
