"""
Packet type and endpoint enumerations.

Endpoints are CATEGORY LABELS: they tell the (out of scope) engine which
handler variant a run will use. They are never live connections.

Names follow LEAN's Packets namespace.
"""

from enum import Enum


class PacketType(str, Enum):
    """Job packet discriminator."""
    BACKTEST_NODE = "BacktestNode"
    LIVE_NODE = "LiveNode"


class TransactionHandlerEndpoint(str, Enum):
    """Where orders are processed."""
    BACKTESTING = "Backtesting"
    BROKERAGE = "Brokerage"


class ResultHandlerEndpoint(str, Enum):
    """Where results are sent."""
    CONSOLE = "Console"
    BACKTESTING = "Backtesting"
    LIVE_TRADING = "LiveTrading"


class DataFeedEndpoint(str, Enum):
    """Where market data comes from."""
    BACKTESTING = "Backtesting"
    FILE_SYSTEM = "FileSystem"
    LIVE_TRADING = "LiveTrading"
    DATABASE = "Database"


class RealTimeEndpoint(str, Enum):
    """Which real-time event scheduler drives the run."""
    BACKTESTING = "Backtesting"
    LIVE_TRADING = "LiveTrading"


class SetupHandlerEndpoint(str, Enum):
    """Which setup handler prepares the run."""
    CONSOLE = "Console"
    BACKTESTING = "Backtesting"
    PAPER_TRADING = "PaperTrading"
    BROKERAGE = "Brokerage"
