"""
Setup handler factory.

Maps the SetupHandlerEndpoint a job names to a concrete handler.
"""

from __future__ import annotations

from typing import Optional

from core.logging import LogStream, get_logger
from core.packets import SetupHandlerEndpoint
from core.setup.base import ISetupHandler
from core.setup.console import ConsoleSetupHandler
from core.setup.paper import PaperTradingSetupHandler
from core.time import Clock

logger = get_logger(LogStream.SETUP)


def create_setup_handler(
    endpoint: SetupHandlerEndpoint,
    algorithm_type_name: Optional[str] = None,
    clock: Optional[Clock] = None
) -> ISetupHandler:
    """
    Create the setup handler for *endpoint*.

    Args:
        endpoint: Setup endpoint (or its string value)
        algorithm_type_name: Type name handed to the handler's loader
        clock: Time source shared with the handler

    Returns:
        ISetupHandler

    Raises:
        ValueError: endpoint has no local handler
    """
    endpoint = SetupHandlerEndpoint(endpoint)

    if endpoint == SetupHandlerEndpoint.CONSOLE:
        handler: ISetupHandler = ConsoleSetupHandler(algorithm_type_name=algorithm_type_name, clock=clock)
    elif endpoint == SetupHandlerEndpoint.PAPER_TRADING:
        handler = PaperTradingSetupHandler(clock=clock, algorithm_type_name=algorithm_type_name)
    else:
        raise ValueError(f"No setup handler available for endpoint: {endpoint.value}")

    logger.debug(f"[FACTORY] {endpoint.value} -> {type(handler).__name__}")
    return handler
