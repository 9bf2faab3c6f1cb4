"""
Buy and Hold - Example algorithm.

ALGORITHM LOGIC:
1. Start with USD 100,000
2. Subscribe to SPY minute data
3. Hold for the whole of 2020

DEMONSTRATES:
- QCAlgorithm declarations inside initialize()
- A single-candidate artifact (loads with no type name)
"""

from core.algorithm import QCAlgorithm


# ============================================================================
# BUY AND HOLD
# ============================================================================

class BuyAndHoldAlgorithm(QCAlgorithm):
    """Holds SPY over a fixed one-year window."""

    def initialize(self) -> None:
        self.set_start_date(2020, 1, 1)
        self.set_end_date(2020, 12, 31)
        self.set_cash(100_000)

        self.spy = self.add_equity("SPY")
        self.debug(f"Initialized {self.spy.symbol} buy-and-hold")
