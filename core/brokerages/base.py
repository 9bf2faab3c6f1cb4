"""
IBrokerage - narrow brokerage interface handed back by setup.

Order routing and fills live in the (out of scope) transaction handler;
setup only needs to construct the right brokerage for the run mode.
"""

from abc import ABC, abstractmethod
import logging

from core.algorithm import IAlgorithm

logger = logging.getLogger(__name__)


class IBrokerage(ABC):
    """Brokerage handle returned by a setup handler."""

    def __init__(self, algorithm: IAlgorithm):
        self.algorithm = algorithm
        self._connected = False

    @property
    @abstractmethod
    def name(self) -> str:
        raise NotImplementedError

    @property
    def is_connected(self) -> bool:
        return self._connected

    def connect(self) -> None:
        self._connected = True
        logger.info(f"{self.name} connected")

    def disconnect(self) -> None:
        self._connected = False
        logger.info(f"{self.name} disconnected")


class BacktestingBrokerage(IBrokerage):
    """Simulated brokerage for historical replay."""

    @property
    def name(self) -> str:
        return "BacktestingBrokerage"


class PaperBrokerage(BacktestingBrokerage):
    """Simulated fills against live data. Used for local live deployments."""

    @property
    def name(self) -> str:
        return "PaperBrokerage"
