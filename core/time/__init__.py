"""Time abstraction layer"""

from .clock import Clock, RealTimeClock, BacktestClock, ClockFactory, utc_now, ensure_utc

__all__ = [
    'Clock',
    'RealTimeClock',
    'BacktestClock',
    'ClockFactory',
    'utc_now',
    'ensure_utc',
]
