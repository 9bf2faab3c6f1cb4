"""
Setup handler factory tests.
"""

import pytest

from core.packets import SetupHandlerEndpoint
from core.setup import ConsoleSetupHandler, PaperTradingSetupHandler, create_setup_handler


def test_console_endpoint(fixed_clock):
    handler = create_setup_handler(SetupHandlerEndpoint.CONSOLE, algorithm_type_name="Foo", clock=fixed_clock)

    assert isinstance(handler, ConsoleSetupHandler)
    assert handler.algorithm_type_name == "Foo"
    assert handler.clock is fixed_clock


def test_paper_endpoint_accepts_string_value():
    handler = create_setup_handler("PaperTrading")

    assert isinstance(handler, PaperTradingSetupHandler)


@pytest.mark.parametrize("endpoint", [SetupHandlerEndpoint.BROKERAGE, SetupHandlerEndpoint.BACKTESTING])
def test_endpoints_without_local_handler(endpoint):
    with pytest.raises(ValueError, match="No setup handler"):
        create_setup_handler(endpoint)


def test_unknown_endpoint_string():
    with pytest.raises(ValueError):
        create_setup_handler("Cluster")
