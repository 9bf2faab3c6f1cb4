"""
ISetupHandler - contract shared by all setup handlers.

A setup handler:
1. Creates the algorithm instance from an artifact (via Loader)
2. Runs the one-time setup handshake for a job packet
3. Optionally intercepts brokerage faults (setup_error_handler)

Errors are accumulated in an explicit list threaded through setup();
handlers hold no error state between calls.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional

from core.algorithm import IAlgorithm, MAX_ORDERS_UNBOUNDED
from core.brokerages import IBrokerage
from core.packets import AlgorithmNodePacket
from core.results import IResultHandler
from core.setup.loader import ArtifactReference, InstantiationError, Loader

ErrorList = List[str]

# Starting date reported when setup never got far enough to resolve one
DEFAULT_STARTING_DATE = datetime(1998, 1, 1, tzinfo=timezone.utc)


@dataclass
class SetupResult:
    """Outcome of ISetupHandler.setup()."""
    success: bool
    errors: ErrorList = field(default_factory=list)
    brokerage: Optional[IBrokerage] = None
    starting_capital: Decimal = Decimal("0")
    starting_date: datetime = DEFAULT_STARTING_DATE


class ISetupHandler(ABC):
    """Setup handler interface."""

    # Maximum wall-clock runtime granted to the algorithm
    maximum_runtime: timedelta = timedelta(days=10 * 365)
    max_orders: int = MAX_ORDERS_UNBOUNDED

    @abstractmethod
    def create_algorithm_instance(self, artifact: ArtifactReference) -> IAlgorithm:
        raise NotImplementedError

    @abstractmethod
    def setup(
        self,
        algorithm: IAlgorithm,
        job: AlgorithmNodePacket,
        errors: Optional[ErrorList] = None
    ) -> SetupResult:
        raise NotImplementedError

    def setup_error_handler(self, results: IResultHandler, brokerage: IBrokerage) -> bool:
        """
        Hook for brokerage-level faults.

        Networked handlers report through ``results``; local handlers have
        nothing to intercept.

        Returns:
            True (fault handling set up)
        """
        return True

    @staticmethod
    def _create_with_loader(loader: Loader, artifact: ArtifactReference) -> IAlgorithm:
        """
        Load via *loader*, re-raising failures with a rebuild hint.

        Raises:
            InstantiationError: same subclass as the loader raised
        """
        try:
            return loader.create_algorithm_instance(artifact)
        except InstantiationError as e:
            raise type(e)(f"{e}: try re-building algorithm.") from e
