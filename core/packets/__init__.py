"""
Job packets exchanged between setup and the execution scheduler.
"""

from .packet import (
    PacketType,
    TransactionHandlerEndpoint,
    ResultHandlerEndpoint,
    DataFeedEndpoint,
    RealTimeEndpoint,
    SetupHandlerEndpoint,
)

from .algorithm_node import (
    AlgorithmNodePacket,
    BacktestNodePacket,
    LiveNodePacket,
    JobPacket,
    parse_job_packet,
    create_job_packet,
)

__all__ = [
    "PacketType",
    "TransactionHandlerEndpoint",
    "ResultHandlerEndpoint",
    "DataFeedEndpoint",
    "RealTimeEndpoint",
    "SetupHandlerEndpoint",
    "AlgorithmNodePacket",
    "BacktestNodePacket",
    "LiveNodePacket",
    "JobPacket",
    "parse_job_packet",
    "create_job_packet",
]
