"""
Securities and data subscriptions declared by an algorithm.

Security / SecurityManager mirror LEAN's Security.cs and SecurityManager;
SubscriptionManager enforces the subscription cap from RunLimits.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterator, List, Optional
import logging

logger = logging.getLogger(__name__)


class SecurityType(str, Enum):
    """Supported asset classes."""
    EQUITY = "equity"
    FOREX = "forex"


class Resolution(str, Enum):
    """Data resolution of a subscription."""
    TICK = "tick"
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAILY = "daily"


@dataclass(frozen=True)
class SubscriptionDataConfig:
    """One data feed the engine must deliver."""
    symbol: str
    security_type: SecurityType
    resolution: Resolution = Resolution.MINUTE
    is_internal_feed: bool = False  # Added by the host, not by the algorithm


class Security:
    """
    Tradable symbol held by an algorithm.

    Usage:
        security = Security('EURUSD', SecurityType.FOREX, quote_currency='USD')
        security.set_price(Decimal('1.0842'))
    """

    def __init__(
        self,
        symbol: str,
        security_type: SecurityType,
        quote_currency: str = "USD",
        base_currency: Optional[str] = None
    ):
        """
        Args:
            symbol: Symbol ticker
            security_type: Asset class
            quote_currency: Currency prices are quoted in
            base_currency: Traded currency (forex only)
        """
        self.symbol = symbol.upper()
        self.security_type = security_type
        self.quote_currency = quote_currency.upper()
        self.base_currency = base_currency.upper() if base_currency else None
        self.price: Optional[Decimal] = None

        logger.debug(f"Security created: {self.symbol}")

    def set_price(self, price: Decimal):
        """Update last known price"""
        self.price = price

    def __repr__(self) -> str:
        return f"Security({self.symbol!r}, {self.security_type.value})"


class SecurityManager:
    """Securities keyed by symbol, with a cap on how many may be added."""

    def __init__(self, max_securities: Optional[int] = None):
        self._securities: Dict[str, Security] = {}
        self.max_securities = max_securities

    def add(self, security: Security) -> Security:
        """
        Add security (idempotent per symbol).

        Raises:
            ValueError: if the security cap would be exceeded
        """
        existing = self._securities.get(security.symbol)
        if existing is not None:
            return existing

        if self.is_full:
            raise ValueError(
                f"Cannot add {security.symbol}: security limit of {self.max_securities} reached"
            )

        self._securities[security.symbol] = security
        return security

    @property
    def is_full(self) -> bool:
        return self.max_securities is not None and len(self._securities) >= self.max_securities

    def get(self, symbol: str) -> Optional[Security]:
        return self._securities.get(symbol.upper())

    def __contains__(self, symbol: str) -> bool:
        return symbol.upper() in self._securities

    def __iter__(self) -> Iterator[Security]:
        return iter(list(self._securities.values()))

    def __len__(self) -> int:
        return len(self._securities)


class SubscriptionManager:
    """Data subscriptions declared by the algorithm (plus internal feeds)."""

    def __init__(self, max_subscriptions: Optional[int] = None):
        self._subscriptions: List[SubscriptionDataConfig] = []
        self.max_subscriptions = max_subscriptions

    def add(
        self,
        symbol: str,
        security_type: SecurityType,
        resolution: Resolution = Resolution.MINUTE,
        is_internal_feed: bool = False
    ) -> SubscriptionDataConfig:
        """
        Add a subscription (idempotent per symbol/resolution).

        Raises:
            ValueError: if the subscription cap would be exceeded
        """
        config = SubscriptionDataConfig(
            symbol=symbol.upper(),
            security_type=security_type,
            resolution=resolution,
            is_internal_feed=is_internal_feed,
        )
        for existing in self._subscriptions:
            if existing.symbol == config.symbol and existing.resolution == config.resolution:
                return existing

        if self.is_full:
            raise ValueError(
                f"Cannot subscribe to {config.symbol}: subscription limit of "
                f"{self.max_subscriptions} reached"
            )

        self._subscriptions.append(config)
        logger.debug(f"Subscription added: {config.symbol} ({resolution.value})")
        return config

    @property
    def is_full(self) -> bool:
        return self.max_subscriptions is not None and len(self._subscriptions) >= self.max_subscriptions

    def has_subscription(self, symbol: str, resolution: Optional[Resolution] = None) -> bool:
        """True if *symbol* is subscribed (at *resolution*, when given)."""
        symbol = symbol.upper()
        return any(
            s.symbol == symbol and (resolution is None or s.resolution == resolution)
            for s in self._subscriptions
        )

    @property
    def subscriptions(self) -> List[SubscriptionDataConfig]:
        return list(self._subscriptions)

    def __len__(self) -> int:
        return len(self._subscriptions)
