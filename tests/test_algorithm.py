"""
QCAlgorithm declaration tests (the calls user code makes in initialize()).
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from core.algorithm import (
    AlgorithmConfigurationError,
    MAX_ORDERS_UNBOUNDED,
    QCAlgorithm,
    RunLimits,
)
from core.time import utc_now


class Empty(QCAlgorithm):
    def initialize(self):
        pass


def test_defaults():
    algorithm = Empty()
    yesterday = utc_now().replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(days=1)

    assert algorithm.start_date == datetime(1998, 1, 1, tzinfo=timezone.utc)
    assert algorithm.end_date == yesterday
    assert algorithm.portfolio.cash == Decimal("100000")
    assert algorithm.live_mode is False
    assert algorithm.max_orders == MAX_ORDERS_UNBOUNDED


def test_qcalgorithm_itself_is_abstract():
    with pytest.raises(TypeError):
        QCAlgorithm()


def test_dates_are_utc_aware():
    algorithm = Empty()
    algorithm.set_start_date(2019, 6, 3)
    algorithm.set_end_date(datetime(2019, 12, 31))

    assert algorithm.start_date.tzinfo is not None
    assert algorithm.end_date == datetime(2019, 12, 31, tzinfo=timezone.utc)


def test_end_before_start_is_rejected():
    algorithm = Empty()
    algorithm.set_start_date(2020, 6, 1)

    with pytest.raises(AlgorithmConfigurationError, match="before start"):
        algorithm.set_end_date(2020, 1, 1)


def test_start_after_explicit_end_is_rejected():
    algorithm = Empty()
    algorithm.set_end_date(2020, 1, 1)

    with pytest.raises(AlgorithmConfigurationError, match="after end"):
        algorithm.set_start_date(2021, 1, 1)


def test_invalid_date_is_configuration_error():
    with pytest.raises(AlgorithmConfigurationError):
        Empty().set_start_date(2020, 2, 30)


def test_negative_cash_rejected():
    with pytest.raises(AlgorithmConfigurationError):
        Empty().set_cash(-1)


def test_set_cash_from_float_is_exact():
    algorithm = Empty()
    algorithm.set_cash(1000.1)

    assert algorithm.portfolio.cash == Decimal("1000.1")


def test_add_forex_registers_base_currency():
    algorithm = Empty()
    security = algorithm.add_forex("eurusd")

    assert security.symbol == "EURUSD"
    assert security.base_currency == "EUR"
    assert "EUR" in algorithm.portfolio.cash_book


@pytest.mark.parametrize("pair", ["EURUS", "EUR/USD", "EURUSDX"])
def test_add_forex_rejects_bad_pairs(pair):
    with pytest.raises(AlgorithmConfigurationError):
        Empty().add_forex(pair)


def test_add_equity_is_idempotent():
    algorithm = Empty()
    first = algorithm.add_equity("SPY")
    second = algorithm.add_equity("spy")

    assert first is second
    assert len(algorithm.subscription_manager) == 1


def test_asset_limits_enforced():
    algorithm = Empty()
    algorithm.set_asset_limits(1, 5, 10)
    algorithm.add_equity("SPY")

    with pytest.raises(AlgorithmConfigurationError, match="security limit"):
        algorithm.add_equity("QQQ")
    assert algorithm.max_orders == 10


def test_negative_limits_rejected():
    with pytest.raises(ValueError):
        RunLimits(-1, 1, 1)
    with pytest.raises(ValueError):
        Empty().set_asset_limits(1, 1, -1)
