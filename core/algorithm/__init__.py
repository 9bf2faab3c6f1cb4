"""
Algorithm capability set: the interface loaded algorithms implement and
the securities / cash book setup manipulates.
"""

from .base import IAlgorithm, QCAlgorithm, AlgorithmConfigurationError
from .limits import RunLimits, MAX_ORDERS_UNBOUNDED
from .portfolio import Cash, CashBook, SecurityPortfolioManager
from .securities import (
    Resolution,
    Security,
    SecurityManager,
    SecurityType,
    SubscriptionDataConfig,
    SubscriptionManager,
)

__all__ = [
    "IAlgorithm",
    "QCAlgorithm",
    "AlgorithmConfigurationError",
    "RunLimits",
    "MAX_ORDERS_UNBOUNDED",
    "Cash",
    "CashBook",
    "SecurityPortfolioManager",
    "Resolution",
    "Security",
    "SecurityManager",
    "SecurityType",
    "SubscriptionDataConfig",
    "SubscriptionManager",
]
