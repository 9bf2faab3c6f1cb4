"""
Cash book and portfolio as seen by setup.

CashBook.ensure_currency_data_feeds() is the only accounting step setup
needs: every non-account currency the algorithm touches must have a
conversion feed, otherwise portfolio value cannot be expressed in the
account currency.

Pattern: LEAN CashBook.cs / Cash.cs
"""

from decimal import Decimal
from typing import Dict, Iterator, List, Optional
import logging

from core.algorithm.securities import (
    Resolution,
    Security,
    SecurityManager,
    SecurityType,
    SubscriptionDataConfig,
    SubscriptionManager,
)

logger = logging.getLogger(__name__)


class Cash:
    """Holding of a single currency."""

    def __init__(self, symbol: str, amount: Decimal, conversion_rate: Decimal = Decimal("0")):
        self.symbol = symbol.upper()
        self.amount = Decimal(amount)
        self.conversion_rate = Decimal(conversion_rate)
        self.conversion_symbol: Optional[str] = None
        self.invert_rate = False

    @property
    def value_in_account_currency(self) -> Decimal:
        return self.amount * self.conversion_rate

    def link_conversion(self, security: Security, invert: bool) -> None:
        """Price this currency from *security* (inverted for ACCT/CUR pairs)."""
        self.conversion_symbol = security.symbol
        self.invert_rate = invert
        if security.price:
            self.conversion_rate = (Decimal("1") / security.price) if invert else security.price

    def __repr__(self) -> str:
        return f"Cash({self.symbol!r}, amount={self.amount}, rate={self.conversion_rate})"


class CashBook:
    """
    Currency holdings keyed by symbol.

    The account currency always exists and always converts at 1.
    """

    def __init__(self, account_currency: str = "USD"):
        self.account_currency = account_currency.upper()
        self._cash: Dict[str, Cash] = {
            self.account_currency: Cash(self.account_currency, Decimal("0"), Decimal("1"))
        }

    def add(self, symbol: str, amount: Decimal, conversion_rate: Decimal = Decimal("0")) -> Cash:
        """Add or replace a currency holding."""
        symbol = symbol.upper()
        if symbol == self.account_currency:
            conversion_rate = Decimal("1")
        cash = Cash(symbol, amount, conversion_rate)
        self._cash[symbol] = cash
        return cash

    def __getitem__(self, symbol: str) -> Cash:
        return self._cash[symbol.upper()]

    def __contains__(self, symbol: str) -> bool:
        return symbol.upper() in self._cash

    def __iter__(self) -> Iterator[Cash]:
        return iter(list(self._cash.values()))

    def __len__(self) -> int:
        return len(self._cash)

    @property
    def total_value_in_account_currency(self) -> Decimal:
        return sum((c.value_in_account_currency for c in self._cash.values()), Decimal("0"))

    def ensure_currency_data_feeds(
        self,
        subscriptions: SubscriptionManager,
        securities: SecurityManager,
        resolution: Resolution = Resolution.MINUTE
    ) -> List[SubscriptionDataConfig]:
        """
        Guarantee a conversion feed for every referenced currency.

        Steps:
        1. Quote currencies of held securities are added to the book (zero amount)
        2. Each non-account currency is linked to an existing CUR/ACCT or
           ACCT/CUR security when one is held
        3. Otherwise a CUR+ACCT forex subscription and security are added

        Args:
            subscriptions: Algorithm subscription manager
            securities: Algorithm securities
            resolution: Resolution for added conversion feeds

        Returns:
            Subscriptions added by this call

        Raises:
            ValueError: if limits prevent adding a required feed
        """
        for security in securities:
            if security.quote_currency not in self:
                self.add(security.quote_currency, Decimal("0"))

        added: List[SubscriptionDataConfig] = []

        for cash in self:
            if cash.symbol == self.account_currency:
                continue

            direct = f"{cash.symbol}{self.account_currency}"
            inverse = f"{self.account_currency}{cash.symbol}"

            if direct in securities:
                cash.link_conversion(securities.get(direct), invert=False)
                continue
            if inverse in securities:
                cash.link_conversion(securities.get(inverse), invert=True)
                continue

            # Check both caps before mutating either manager
            if securities.is_full:
                raise ValueError(
                    f"Cannot add conversion security {direct}: security limit of "
                    f"{securities.max_securities} reached"
                )
            if subscriptions.is_full and not subscriptions.has_subscription(direct, resolution):
                raise ValueError(
                    f"Cannot subscribe to {direct}: subscription limit of "
                    f"{subscriptions.max_subscriptions} reached"
                )

            config = subscriptions.add(
                direct,
                SecurityType.FOREX,
                resolution=resolution,
                is_internal_feed=True,
            )
            security = securities.add(Security(
                direct,
                SecurityType.FOREX,
                quote_currency=self.account_currency,
                base_currency=cash.symbol,
            ))
            cash.link_conversion(security, invert=False)
            added.append(config)

            logger.info(f"Added conversion feed {direct} for {cash.symbol} cash")

        return added


class SecurityPortfolioManager:
    """Portfolio view used by setup: cash only, no holdings accounting."""

    def __init__(self, cash_book: Optional[CashBook] = None):
        self.cash_book = cash_book or CashBook()

    @property
    def cash(self) -> Decimal:
        """Total cash expressed in the account currency."""
        return self.cash_book.total_value_in_account_currency

    def set_cash(self, amount: Decimal, currency: Optional[str] = None, conversion_rate: Decimal = Decimal("0")) -> None:
        """Set cash for the account currency (or another currency)."""
        self.cash_book.add(currency or self.cash_book.account_currency, Decimal(amount), conversion_rate)
