"""
ConsoleSetupHandler tests.

TESTS:
1. Backtest: period, identity, endpoints and capital written from the algorithm
2. Live: token timing, identity and endpoints, paper brokerage attached
3. initialize() failures: exactly one prefixed error, setup reports failure
4. Repeated setup writes the same values; errors never leak between calls
5. Creation errors carry the rebuild hint
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from core.algorithm import MAX_ORDERS_UNBOUNDED, QCAlgorithm
from core.algorithm.securities import SecurityType
from core.brokerages import BacktestingBrokerage, PaperBrokerage
from core.config import AlgorithmConfig, HostConfig
from core.packets import (
    AlgorithmNodePacket,
    BacktestNodePacket,
    DataFeedEndpoint,
    LiveNodePacket,
    PacketType,
    RealTimeEndpoint,
    ResultHandlerEndpoint,
    SetupHandlerEndpoint,
    TransactionHandlerEndpoint,
)
from core.setup import (
    AmbiguousTypeError,
    ConstructionFaultError,
    ConsoleSetupHandler,
    ERROR_PREFIX,
    NoMatchingTypeError,
)


# ============================================================================
# ALGORITHMS
# ============================================================================

class Year2020(QCAlgorithm):
    def initialize(self):
        self.set_start_date(2020, 1, 1)
        self.set_end_date(2020, 12, 31)
        self.set_cash(100000)
        self.add_equity("SPY")


class FailsInInitialize(QCAlgorithm):
    def initialize(self):
        self.set_cash(5000)
        raise RuntimeError("bad universe definition")


class HoldsEuros(QCAlgorithm):
    def initialize(self):
        self.set_start_date(2021, 1, 1)
        self.set_end_date(2021, 3, 31)
        self.set_cash(10000)
        self.set_cash(2500, currency="EUR")


@pytest.fixture
def handler(fixed_clock):
    return ConsoleSetupHandler(clock=fixed_clock)


# ============================================================================
# BACKTEST
# ============================================================================

def test_backtest_writes_period_and_capital(handler):
    algorithm = Year2020()
    job = BacktestNodePacket(algorithm_id="year-2020")

    result = handler.setup(algorithm, job)

    assert result.success is True
    assert result.errors == []
    assert job.period_start == datetime(2020, 1, 1, tzinfo=timezone.utc)
    assert job.period_finish == datetime(2020, 12, 31, tzinfo=timezone.utc)
    assert result.starting_capital == Decimal("100000")
    assert result.starting_date == job.period_start


def test_backtest_writes_local_identity_and_endpoints(handler):
    job = BacktestNodePacket(user_id=7)

    handler.setup(Year2020(), job)

    assert job.backtest_id == "LOCALHOST"
    assert job.run_id == "LOCALHOST"
    assert job.user_id == 1001
    assert job.endpoints() == {
        "transaction_endpoint": TransactionHandlerEndpoint.BACKTESTING,
        "result_endpoint": ResultHandlerEndpoint.CONSOLE,
        "data_endpoint": DataFeedEndpoint.FILE_SYSTEM,
        "real_time_endpoint": RealTimeEndpoint.BACKTESTING,
        "setup_endpoint": SetupHandlerEndpoint.CONSOLE,
    }


def test_backtest_lifts_limits_and_uses_backtesting_brokerage(handler):
    algorithm = Year2020()

    result = handler.setup(algorithm, BacktestNodePacket())

    assert isinstance(result.brokerage, BacktestingBrokerage)
    assert not isinstance(result.brokerage, PaperBrokerage)
    assert algorithm.securities.max_securities == 999
    assert algorithm.subscription_manager.max_subscriptions == 999
    assert algorithm.max_orders == MAX_ORDERS_UNBOUNDED
    assert algorithm.live_mode is False


def test_backtest_adds_currency_conversion_feed(handler):
    algorithm = HoldsEuros()

    result = handler.setup(algorithm, BacktestNodePacket())

    assert result.success
    assert "EURUSD" in algorithm.securities
    configs = algorithm.subscription_manager.subscriptions
    eur = [c for c in configs if c.symbol == "EURUSD"]
    assert len(eur) == 1
    assert eur[0].is_internal_feed is True
    assert eur[0].security_type == SecurityType.FOREX
    # No EURUSD price yet, so euros contribute nothing
    assert result.starting_capital == Decimal("10000")


def test_backtest_initialize_failure(handler):
    job = BacktestNodePacket()

    result = handler.setup(FailsInInitialize(), job)

    assert result.success is False
    assert len(result.errors) == 1
    assert result.errors[0] == ERROR_PREFIX + "bad universe definition"
    assert all(value is None for value in job.endpoints().values())
    assert job.period_start is None
    assert job.backtest_id == ""
    assert result.starting_capital == Decimal("0")
    assert isinstance(result.brokerage, BacktestingBrokerage)


# ============================================================================
# LIVE
# ============================================================================

def test_live_token_timing(handler, fixed_clock):
    job = LiveNodePacket()

    result = handler.setup(Year2020(), job)

    assert result.success is True
    assert job.issued_at == fixed_clock.now() - timedelta(seconds=86339)
    assert job.life_time == timedelta(seconds=86399)
    # First token expires one minute after setup
    assert job.expires_at == fixed_clock.now() + timedelta(seconds=60)


def test_live_token_timing_on_real_clock():
    job = LiveNodePacket()

    ConsoleSetupHandler().setup(Year2020(), job)

    expected = datetime.now(timezone.utc) - timedelta(seconds=86339)
    assert abs((job.issued_at - expected).total_seconds()) < 1


def test_live_writes_identity_tokens_and_endpoints(handler):
    job = LiveNodePacket(refresh_token="stale")

    handler.setup(Year2020(), job)

    assert job.deploy_id == "LOCALHOST"
    assert job.access_token == "123456"
    assert job.account_id == "123456"
    assert job.refresh_token == ""
    assert job.endpoints() == {
        "transaction_endpoint": TransactionHandlerEndpoint.BACKTESTING,
        "result_endpoint": ResultHandlerEndpoint.LIVE_TRADING,
        "data_endpoint": DataFeedEndpoint.LIVE_TRADING,
        "real_time_endpoint": RealTimeEndpoint.LIVE_TRADING,
        "setup_endpoint": SetupHandlerEndpoint.CONSOLE,
    }


def test_live_uses_paper_brokerage_and_clock_start(handler, fixed_clock):
    algorithm = Year2020()

    result = handler.setup(algorithm, LiveNodePacket())

    assert isinstance(result.brokerage, PaperBrokerage)
    assert algorithm.live_mode is True
    assert result.starting_date == fixed_clock.now()
    assert result.starting_capital == Decimal("100000")


def test_live_initialize_failure_keeps_fields_written_before_it(handler):
    job = LiveNodePacket()

    result = handler.setup(FailsInInitialize(), job)

    assert result.success is False
    assert result.errors == [ERROR_PREFIX + "bad universe definition"]
    # Identity and endpoints are written before the paper handler runs
    assert job.deploy_id == "LOCALHOST"
    assert job.result_endpoint == ResultHandlerEndpoint.LIVE_TRADING


def test_unsupported_packet_is_reported(handler):
    job = AlgorithmNodePacket(type=PacketType.LIVE_NODE)

    result = handler.setup(Year2020(), job)

    assert result.success is False
    assert len(result.errors) == 1
    assert result.errors[0].startswith(ERROR_PREFIX)
    assert "Unsupported job packet" in result.errors[0]


# ============================================================================
# REPEATABILITY / ERROR ACCUMULATOR
# ============================================================================

@pytest.mark.parametrize("packet_type", [BacktestNodePacket, LiveNodePacket])
def test_repeated_setup_writes_same_values(handler, packet_type):
    job = packet_type(algorithm_id="repeat")
    algorithm = Year2020()

    first = handler.setup(algorithm, job)
    snapshot = job.model_dump()
    second = handler.setup(algorithm, job)

    assert job.model_dump() == snapshot
    assert first.success and second.success
    assert first.starting_capital == second.starting_capital
    assert first.starting_date == second.starting_date


def test_errors_do_not_leak_between_calls(handler):
    failed = handler.setup(FailsInInitialize(), BacktestNodePacket())
    passed = handler.setup(Year2020(), BacktestNodePacket())

    assert failed.success is False
    assert passed.success is True
    assert passed.errors == []


def test_caller_supplied_errors_fail_the_setup(handler):
    errors = ["earlier problem"]

    result = handler.setup(Year2020(), BacktestNodePacket(), errors)

    assert result.success is False
    assert result.errors is errors
    assert errors == ["earlier problem"]


# ============================================================================
# HANDLER SURFACE
# ============================================================================

def test_setup_error_handler_is_a_no_op(handler, result_handler):
    algorithm = Year2020()

    assert handler.setup_error_handler(result_handler, BacktestingBrokerage(algorithm)) is True
    assert result_handler.errors == []
    assert result_handler.runtime_errors == []


def test_run_limits_defaults(handler):
    assert handler.maximum_runtime == timedelta(days=3650)
    assert handler.max_orders == 2**31 - 1


def test_create_algorithm_instance_by_type_name(write_artifact):
    path = write_artifact("""
        class First(QCAlgorithm):
            def initialize(self):
                pass


        class Second(QCAlgorithm):
            def initialize(self):
                pass
    """)

    algorithm = ConsoleSetupHandler(algorithm_type_name="Second").create_algorithm_instance(path)

    assert type(algorithm).__name__ == "Second"


def test_create_algorithm_instance_adds_rebuild_hint(write_artifact):
    path = write_artifact("""
        class First(QCAlgorithm):
            def initialize(self):
                pass


        class Second(QCAlgorithm):
            def initialize(self):
                pass
    """)

    with pytest.raises(AmbiguousTypeError) as exc:
        ConsoleSetupHandler().create_algorithm_instance(path)

    assert str(exc.value).endswith(": try re-building algorithm.")
    assert isinstance(exc.value.__cause__, AmbiguousTypeError)


def test_create_algorithm_instance_unknown_type(write_artifact):
    path = write_artifact("""
        class Only(QCAlgorithm):
            def initialize(self):
                pass
    """)

    with pytest.raises(NoMatchingTypeError, match="try re-building algorithm"):
        ConsoleSetupHandler(algorithm_type_name="Missing").create_algorithm_instance(path)


def test_from_config(fixed_clock):
    config = HostConfig(algorithm=AlgorithmConfig(
        location="algorithms/buy_and_hold.py",
        type_name="BuyAndHoldAlgorithm",
        load_timeout_seconds=12,
    ))

    handler = ConsoleSetupHandler.from_config(config, clock=fixed_clock)

    assert handler.algorithm_type_name == "BuyAndHoldAlgorithm"
    assert handler.load_timeout == timedelta(seconds=12)
    assert handler.clock is fixed_clock


def test_default_load_timeout_is_one_hour():
    assert ConsoleSetupHandler().load_timeout == timedelta(hours=1)


def test_create_algorithm_instance_exit_keeps_hint(write_artifact):
    path = write_artifact("""
        raise SystemExit("artifact refused to load")
    """)

    with pytest.raises(ConstructionFaultError, match="try re-building algorithm"):
        ConsoleSetupHandler().create_algorithm_instance(path)
