"""
ConsoleSetupHandler - local setup for backtests and paper-traded live runs.

STATE MACHINE (entered once per call, no internal retries):

    BacktestNode:
        limits (unbounded) -> initialize() -> currency feeds
        -> period / identity / endpoints written to packet
    LiveNode:
        identity / tokens / endpoints written to packet
        -> PaperTradingSetupHandler.setup() (initialize + brokerage)

Any exception inside the active branch is caught ONCE at the top, logged
and appended to the error list. Packet mutations applied before the
failure are NOT rolled back. success == (error list is empty), evaluated
after the branch.

Loading is deliberately slow-tolerant here: the default load timeout is an
hour so a run stepped through in a debugger is not aborted.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional, Tuple

from core.algorithm import IAlgorithm, RunLimits
from core.brokerages import BacktestingBrokerage, IBrokerage
from core.logging import LogContext, LogStream, get_logger
from core.packets import (
    AlgorithmNodePacket,
    BacktestNodePacket,
    DataFeedEndpoint,
    LiveNodePacket,
    RealTimeEndpoint,
    ResultHandlerEndpoint,
    SetupHandlerEndpoint,
    TransactionHandlerEndpoint,
)
from core.setup.base import DEFAULT_STARTING_DATE, ErrorList, ISetupHandler, SetupResult
from core.setup.loader import ArtifactReference, Loader, type_name_selector
from core.setup.paper import PaperTradingSetupHandler
from core.time import Clock, RealTimeClock

logger = get_logger(LogStream.SETUP)


# Local identity written into packets
LOCAL_RUN_ID = "LOCALHOST"
LOCAL_USER_ID = 1001
LOCAL_TOKEN = "123456"

# Token lifetime, and an issued-at offset that makes the first access
# token expire 60 seconds after setup so refresh logic runs immediately
TOKEN_LIFETIME = timedelta(seconds=86399)
TOKEN_REFRESH_WINDOW = timedelta(seconds=60)

ERROR_PREFIX = "Failed to initialize algorithm: Initialize(): "


class ConsoleSetupHandler(ISetupHandler):
    """
    Setup handler for local (console) runs.

    Usage:
        handler = ConsoleSetupHandler(algorithm_type_name="BuyAndHoldAlgorithm")
        algorithm = handler.create_algorithm_instance("algorithms/buy_and_hold.py")

        job = BacktestNodePacket(algorithm_id="buy-and-hold")
        result = handler.setup(algorithm, job)
        if not result.success:
            for error in result.errors:
                print(error)
    """

    DEFAULT_LOAD_TIMEOUT = timedelta(hours=1)

    def __init__(
        self,
        algorithm_type_name: Optional[str] = None,
        load_timeout: timedelta = DEFAULT_LOAD_TIMEOUT,
        clock: Optional[Clock] = None,
        paper_handler: Optional[ISetupHandler] = None
    ):
        """
        Args:
            algorithm_type_name: Type to pick from the artifact (None = the only one)
            load_timeout: Time limit for load + construction
            clock: Time source for live token / start stamps
            paper_handler: Brokerage collaborator for live jobs
        """
        self.algorithm_type_name = algorithm_type_name
        self.load_timeout = load_timeout
        self.clock = clock or RealTimeClock()
        self.paper_handler = paper_handler or PaperTradingSetupHandler(clock=self.clock)

    @classmethod
    def from_config(cls, config, clock: Optional[Clock] = None) -> "ConsoleSetupHandler":
        """Build from a validated HostConfig."""
        return cls(
            algorithm_type_name=config.algorithm.type_name,
            load_timeout=timedelta(seconds=config.algorithm.load_timeout_seconds),
            clock=clock,
        )

    # ========================================================================
    # ALGORITHM CREATION
    # ========================================================================

    def create_algorithm_instance(self, artifact: ArtifactReference) -> IAlgorithm:
        """
        Create the algorithm, honoring the configured type name.

        Raises:
            InstantiationError: with "try re-building algorithm." appended
        """
        loader = Loader(self.load_timeout, type_name_selector(self.algorithm_type_name))
        return self._create_with_loader(loader, artifact)

    # ========================================================================
    # SETUP
    # ========================================================================

    def setup(
        self,
        algorithm: IAlgorithm,
        job: AlgorithmNodePacket,
        errors: Optional[ErrorList] = None
    ) -> SetupResult:
        """
        Set up the algorithm cash, dates and packet for a local run.

        Args:
            algorithm: Freshly created algorithm instance
            job: Backtest or live packet, mutated in place
            errors: Accumulator (a fresh list when None)

        Returns:
            SetupResult; success only when the accumulator is empty
        """
        errors = [] if errors is None else errors
        brokerage: Optional[IBrokerage] = BacktestingBrokerage(algorithm)
        starting_capital = Decimal("0")
        starting_date = DEFAULT_STARTING_DATE

        with LogContext(job.algorithm_id or None):
            try:
                if isinstance(job, BacktestNodePacket):
                    starting_date, starting_capital = self._setup_backtest(algorithm, job)
                elif isinstance(job, LiveNodePacket):
                    brokerage, starting_date, starting_capital = self._setup_live(algorithm, job, errors)
                else:
                    raise TypeError(f"Unsupported job packet: {type(job).__name__}")
            except Exception as err:
                logger.error(f"ConsoleSetupHandler.setup(): {err}", exc_info=True)
                errors.append(ERROR_PREFIX + str(err))

            success = not errors
            if success:
                logger.info(
                    f"{job.type.value} job configured "
                    f"(starting_capital={starting_capital}, starting_date={starting_date.isoformat()})"
                )
            else:
                logger.warning(f"{job.type.value} job setup failed with {len(errors)} error(s)")

        return SetupResult(
            success=success,
            errors=errors,
            brokerage=brokerage,
            starting_capital=starting_capital,
            starting_date=starting_date,
        )

    def _setup_backtest(self, algorithm: IAlgorithm, job: BacktestNodePacket) -> Tuple[datetime, Decimal]:
        # No limits for local backtests
        limits = RunLimits.unbounded()
        algorithm.set_asset_limits(limits.max_securities, limits.max_subscriptions, limits.max_orders)

        algorithm.initialize()

        # Conversion feeds the algorithm did not add itself
        algorithm.portfolio.cash_book.ensure_currency_data_feeds(
            algorithm.subscription_manager,
            algorithm.securities,
        )

        job.period_start = algorithm.start_date
        job.period_finish = algorithm.end_date
        job.backtest_id = LOCAL_RUN_ID
        job.user_id = LOCAL_USER_ID

        job.transaction_endpoint = TransactionHandlerEndpoint.BACKTESTING
        job.result_endpoint = ResultHandlerEndpoint.CONSOLE
        job.data_endpoint = DataFeedEndpoint.FILE_SYSTEM
        job.real_time_endpoint = RealTimeEndpoint.BACKTESTING
        job.setup_endpoint = SetupHandlerEndpoint.CONSOLE

        return job.period_start, algorithm.portfolio.cash

    def _setup_live(
        self,
        algorithm: IAlgorithm,
        job: LiveNodePacket,
        errors: ErrorList
    ) -> Tuple[Optional[IBrokerage], datetime, Decimal]:
        job.deploy_id = LOCAL_RUN_ID
        job.issued_at = self.clock.now() - (TOKEN_LIFETIME - TOKEN_REFRESH_WINDOW)
        job.life_time = TOKEN_LIFETIME
        job.access_token = LOCAL_TOKEN
        job.account_id = LOCAL_TOKEN
        job.refresh_token = ""

        # Orders are simulated even in live mode
        job.transaction_endpoint = TransactionHandlerEndpoint.BACKTESTING
        job.result_endpoint = ResultHandlerEndpoint.LIVE_TRADING
        job.data_endpoint = DataFeedEndpoint.LIVE_TRADING
        job.real_time_endpoint = RealTimeEndpoint.LIVE_TRADING
        job.setup_endpoint = SetupHandlerEndpoint.CONSOLE

        paper = self.paper_handler.setup(algorithm, job, errors)

        return paper.brokerage, self.clock.now(), algorithm.portfolio.cash
