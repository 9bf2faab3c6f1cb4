"""
PaperTradingSetupHandler - live-mode setup against a paper brokerage.

Used directly for paper deployments and as the brokerage collaborator
of ConsoleSetupHandler's live branch. Exceptions from initialize() or
the currency feeds propagate to the caller.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

from core.algorithm import IAlgorithm, RunLimits
from core.brokerages import PaperBrokerage
from core.logging import LogStream, get_logger
from core.packets import AlgorithmNodePacket, LiveNodePacket
from core.setup.base import ErrorList, ISetupHandler, SetupResult
from core.setup.loader import ArtifactReference, Loader, type_name_selector
from core.time import Clock, RealTimeClock

logger = get_logger(LogStream.SETUP)


class PaperTradingSetupHandler(ISetupHandler):
    """Configures a live job to trade against PaperBrokerage."""

    def __init__(
        self,
        clock: Optional[Clock] = None,
        limits: Optional[RunLimits] = None,
        algorithm_type_name: Optional[str] = None,
        load_timeout: timedelta = Loader.DEFAULT_LOAD_TIMEOUT
    ):
        self.clock = clock or RealTimeClock()
        self.limits = limits or RunLimits.paper()
        self.algorithm_type_name = algorithm_type_name
        self.load_timeout = load_timeout
        self.max_orders = self.limits.max_orders

    def create_algorithm_instance(self, artifact: ArtifactReference) -> IAlgorithm:
        loader = Loader(self.load_timeout, type_name_selector(self.algorithm_type_name))
        return self._create_with_loader(loader, artifact)

    def setup(
        self,
        algorithm: IAlgorithm,
        job: AlgorithmNodePacket,
        errors: Optional[ErrorList] = None
    ) -> SetupResult:
        """
        Initialize the algorithm in live mode and build its paper brokerage.

        Raises:
            Exception: anything raised by the algorithm's initialize() or
                the currency feed step
        """
        errors = [] if errors is None else errors

        if not isinstance(job, LiveNodePacket):
            message = f"PaperTradingSetupHandler requires a live job packet, got {job.type.value}"
            logger.error(message)
            errors.append(message)
            return SetupResult(success=False, errors=errors)

        algorithm.set_live_mode(True)
        algorithm.set_asset_limits(
            self.limits.max_securities,
            self.limits.max_subscriptions,
            self.limits.max_orders,
        )

        algorithm.initialize()

        added = algorithm.portfolio.cash_book.ensure_currency_data_feeds(
            algorithm.subscription_manager,
            algorithm.securities,
        )

        brokerage = PaperBrokerage(algorithm)

        logger.info(
            f"Paper trading setup complete "
            f"(cash={algorithm.portfolio.cash}, securities={len(algorithm.securities)}, "
            f"conversion_feeds={len(added)})"
        )

        return SetupResult(
            success=not errors,
            errors=errors,
            brokerage=brokerage,
            starting_capital=algorithm.portfolio.cash,
            starting_date=self.clock.now(),
        )
