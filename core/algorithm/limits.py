"""
Run limits applied to an algorithm before its own initialize() runs.
"""

from dataclasses import dataclass

# Largest order count a 32-bit engine counter can hold
MAX_ORDERS_UNBOUNDED = 2**31 - 1


@dataclass(frozen=True)
class RunLimits:
    """Caps on what an algorithm may declare during initialize()."""
    max_securities: int
    max_subscriptions: int
    max_orders: int

    def __post_init__(self):
        for name in ("max_securities", "max_subscriptions", "max_orders"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")

    @classmethod
    def unbounded(cls) -> "RunLimits":
        """Permissive limits used for local backtests."""
        return cls(max_securities=999, max_subscriptions=999, max_orders=MAX_ORDERS_UNBOUNDED)

    @classmethod
    def paper(cls) -> "RunLimits":
        """Limits for paper-trading deployments."""
        return cls(max_securities=500, max_subscriptions=500, max_orders=10_000)
