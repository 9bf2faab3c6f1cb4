"""
Forex Basket - Example algorithm holding non-USD cash.

ALGORITHM LOGIC:
1. Hold USD and EUR/JPY cash balances
2. Trade EURUSD directly
3. JPY has no pair in the algorithm; setup adds the conversion feed

DEMONSTRATES:
- Multi-currency cash book
- Currency conversion feeds added by setup
- Two candidates in one artifact (select with a type name)
"""

from core.algorithm import QCAlgorithm


class ForexBasketAlgorithm(QCAlgorithm):
    """EURUSD plus idle JPY cash."""

    def initialize(self) -> None:
        self.set_start_date(2021, 1, 4)
        self.set_end_date(2021, 6, 30)
        self.set_cash(50_000)
        self.set_cash(1_000_000, currency="JPY")

        self.add_forex("EURUSD")


class ForexBasketWithoutJpy(ForexBasketAlgorithm):
    """Same basket with the JPY balance dropped."""

    def initialize(self) -> None:
        super().initialize()
        self.portfolio.cash_book["JPY"].amount = 0
