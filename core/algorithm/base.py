"""
IAlgorithm - Abstract interface every loadable algorithm implements.

CRITICAL CONTRACT:
1. Loadable algorithms MUST subclass IAlgorithm (usually via QCAlgorithm)
2. Constructors take NO arguments and do no heavy work
3. initialize() declares cash, dates and securities - called once by setup
4. Limits are applied BEFORE initialize(); declarations beyond them raise

Setup reads start_date / end_date / portfolio.cash after initialize() to
fill the job packet.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional, Union
from core.algorithm.limits import RunLimits, MAX_ORDERS_UNBOUNDED
from core.algorithm.portfolio import SecurityPortfolioManager
from core.algorithm.securities import (
    Resolution,
    Security,
    SecurityManager,
    SecurityType,
    SubscriptionManager,
)
from core.logging import LogStream, get_logger
from core.time import ensure_utc, utc_now


class AlgorithmConfigurationError(ValueError):
    """Raised when initialize() declares an invalid configuration."""


class IAlgorithm(ABC):
    """
    Capability set the host relies on.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Declare cash, dates and securities. Called once on setup."""
        raise NotImplementedError

    @property
    @abstractmethod
    def portfolio(self) -> SecurityPortfolioManager:
        raise NotImplementedError

    @property
    @abstractmethod
    def securities(self) -> SecurityManager:
        raise NotImplementedError

    @property
    @abstractmethod
    def subscription_manager(self) -> SubscriptionManager:
        raise NotImplementedError

    @property
    @abstractmethod
    def start_date(self) -> datetime:
        raise NotImplementedError

    @property
    @abstractmethod
    def end_date(self) -> datetime:
        raise NotImplementedError

    @property
    @abstractmethod
    def live_mode(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def set_asset_limits(self, max_securities: int, max_subscriptions: int, max_orders: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_live_mode(self, live_mode: bool) -> None:
        raise NotImplementedError


class QCAlgorithm(IAlgorithm):
    """
    Base class for user algorithms.

    Subclasses implement initialize() only:

        class BuyAndHold(QCAlgorithm):
            def initialize(self):
                self.set_start_date(2020, 1, 1)
                self.set_end_date(2020, 12, 31)
                self.set_cash(100_000)
                self.add_equity("SPY")
    """

    DEFAULT_START = datetime(1998, 1, 1, tzinfo=timezone.utc)
    DEFAULT_CASH = Decimal("100000")

    def __init__(self):
        self._portfolio = SecurityPortfolioManager()
        self._portfolio.set_cash(self.DEFAULT_CASH)
        self._securities = SecurityManager()
        self._subscription_manager = SubscriptionManager()

        self._start_date = self.DEFAULT_START
        today = utc_now().replace(hour=0, minute=0, second=0, microsecond=0)
        self._end_date = today - timedelta(days=1)

        self._end_date_explicit = False
        self._live_mode = False
        self.max_orders = MAX_ORDERS_UNBOUNDED

        self.logger = get_logger(LogStream.ALGORITHM).getChild(type(self).__name__)

    # -- IAlgorithm ----------------------------------------------------------

    @property
    def portfolio(self) -> SecurityPortfolioManager:
        return self._portfolio

    @property
    def securities(self) -> SecurityManager:
        return self._securities

    @property
    def subscription_manager(self) -> SubscriptionManager:
        return self._subscription_manager

    @property
    def start_date(self) -> datetime:
        return self._start_date

    @property
    def end_date(self) -> datetime:
        return self._end_date

    @property
    def live_mode(self) -> bool:
        return self._live_mode

    def set_asset_limits(self, max_securities: int, max_subscriptions: int, max_orders: int) -> None:
        """Apply caps (validated through RunLimits)."""
        limits = RunLimits(max_securities, max_subscriptions, max_orders)
        self._securities.max_securities = limits.max_securities
        self._subscription_manager.max_subscriptions = limits.max_subscriptions
        self.max_orders = limits.max_orders

    def set_live_mode(self, live_mode: bool) -> None:
        self._live_mode = bool(live_mode)

    # -- Declarations used inside initialize() -------------------------------

    def set_cash(self, amount: Union[int, float, Decimal, str], currency: Optional[str] = None) -> None:
        """Set starting cash (account currency unless *currency* is given)."""
        value = Decimal(str(amount))
        if value < 0:
            raise AlgorithmConfigurationError(f"Cash must be >= 0, got {value}")
        self._portfolio.set_cash(value, currency)

    def set_start_date(self, year_or_date: Union[int, datetime], month: int = 1, day: int = 1) -> None:
        start = self._to_datetime(year_or_date, month, day)
        if self._end_date_explicit and start > self._end_date:
            raise AlgorithmConfigurationError(
                f"Start date {start.date()} is after end date {self._end_date.date()}"
            )
        self._start_date = start

    def set_end_date(self, year_or_date: Union[int, datetime], month: int = 1, day: int = 1) -> None:
        end = self._to_datetime(year_or_date, month, day)
        if end < self._start_date:
            raise AlgorithmConfigurationError(
                f"End date {end.date()} is before start date {self._start_date.date()}"
            )
        self._end_date = end
        self._end_date_explicit = True

    def add_equity(self, ticker: str, resolution: Resolution = Resolution.MINUTE) -> Security:
        return self._add_security(Security(ticker, SecurityType.EQUITY), resolution)

    def add_forex(self, pair: str, resolution: Resolution = Resolution.MINUTE) -> Security:
        """Add a 6-letter currency pair, e.g. 'EURUSD'."""
        pair = pair.upper()
        if len(pair) != 6 or not pair.isalpha():
            raise AlgorithmConfigurationError(f"Invalid forex pair: {pair!r}")
        security = Security(pair, SecurityType.FOREX, quote_currency=pair[3:], base_currency=pair[:3])
        return self._add_security(security, resolution)

    def debug(self, message: str) -> None:
        self.logger.info(message)

    # -- Helpers -------------------------------------------------------------

    def _add_security(self, security: Security, resolution: Resolution) -> Security:
        try:
            security = self._securities.add(security)
            self._subscription_manager.add(security.symbol, security.security_type, resolution)
        except ValueError as e:
            raise AlgorithmConfigurationError(str(e)) from e

        if security.base_currency and security.base_currency not in self._portfolio.cash_book:
            self._portfolio.cash_book.add(security.base_currency, Decimal("0"))
        return security

    @staticmethod
    def _to_datetime(year_or_date: Union[int, datetime], month: int, day: int) -> datetime:
        if isinstance(year_or_date, datetime):
            return ensure_utc(year_or_date)
        try:
            return datetime(year_or_date, month, day, tzinfo=timezone.utc)
        except (TypeError, ValueError) as e:
            raise AlgorithmConfigurationError(f"Invalid date {year_or_date}-{month}-{day}: {e}") from e
