"""
Algorithm node packets - the job descriptor exchanged with the scheduler.

CRITICAL CONTRACT:
1. A packet's ``type`` is fixed at construction (frozen discriminator)
2. BacktestNodePacket and LiveNodePacket carry DISJOINT mode fields
3. Setup mutates packets in place (validate_assignment keeps them typed)
4. Endpoint fields stay None until a setup handler binds them

JobPacket is a tagged union; parse_job_packet() dispatches on ``type``.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .packet import (
    DataFeedEndpoint,
    PacketType,
    RealTimeEndpoint,
    ResultHandlerEndpoint,
    SetupHandlerEndpoint,
    TransactionHandlerEndpoint,
)


# ============================================================================
# COMMON FIELDS
# ============================================================================

class AlgorithmNodePacket(BaseModel):
    """
    Fields shared by every job packet.

    Not instantiated directly: use BacktestNodePacket or LiveNodePacket.
    """

    type: PacketType = Field(frozen=True, description="Mode tag (discriminator)")

    # Identity
    user_id: int = Field(default=0, ge=0, description="Owner of the run")
    project_id: int = Field(default=0, ge=0, description="Project the algorithm belongs to")
    algorithm_id: str = Field(default="", description="Algorithm identifier")
    compile_id: str = Field(default="", description="Identifier of the compiled artifact")

    # Endpoint bindings (set by setup)
    transaction_endpoint: Optional[TransactionHandlerEndpoint] = None
    result_endpoint: Optional[ResultHandlerEndpoint] = None
    data_endpoint: Optional[DataFeedEndpoint] = None
    real_time_endpoint: Optional[RealTimeEndpoint] = None
    setup_endpoint: Optional[SetupHandlerEndpoint] = None

    model_config = ConfigDict(validate_assignment=True)

    @property
    def run_id(self) -> str:
        """Identifier of this run (backtest id or deploy id; empty until set)."""
        return ""

    def endpoints(self) -> Dict[str, Any]:
        """Current endpoint bindings keyed by field name."""
        return {
            "transaction_endpoint": self.transaction_endpoint,
            "result_endpoint": self.result_endpoint,
            "data_endpoint": self.data_endpoint,
            "real_time_endpoint": self.real_time_endpoint,
            "setup_endpoint": self.setup_endpoint,
        }


# ============================================================================
# BACKTEST
# ============================================================================

class BacktestNodePacket(AlgorithmNodePacket):
    """Historical replay job. Period bounds come from the algorithm."""

    type: Literal[PacketType.BACKTEST_NODE] = Field(default=PacketType.BACKTEST_NODE, frozen=True)

    backtest_id: str = ""
    period_start: Optional[datetime] = None
    period_finish: Optional[datetime] = None

    @property
    def run_id(self) -> str:
        return self.backtest_id


# ============================================================================
# LIVE
# ============================================================================

class LiveNodePacket(AlgorithmNodePacket):
    """Live deployment job. Token fields drive access-token refresh."""

    type: Literal[PacketType.LIVE_NODE] = Field(default=PacketType.LIVE_NODE, frozen=True)

    deploy_id: str = ""
    brokerage: str = Field(default="PaperBrokerage", description="Brokerage name for the deployment")
    issued_at: Optional[datetime] = None
    life_time: timedelta = timedelta(0)
    access_token: str = ""
    refresh_token: str = ""
    account_id: str = ""

    @property
    def run_id(self) -> str:
        return self.deploy_id

    @property
    def expires_at(self) -> Optional[datetime]:
        """When the current access token stops being valid."""
        if self.issued_at is None:
            return None
        return self.issued_at + self.life_time


# ============================================================================
# TAGGED UNION
# ============================================================================

JobPacket = Annotated[
    Union[BacktestNodePacket, LiveNodePacket],
    Field(discriminator="type"),
]

_job_packet_adapter: TypeAdapter = TypeAdapter(JobPacket)


def parse_job_packet(data: Dict[str, Any]) -> Union[BacktestNodePacket, LiveNodePacket]:
    """
    Build a typed packet from raw data (e.g. scheduler JSON).

    Raises:
        pydantic.ValidationError: unknown ``type`` or invalid fields
    """
    return _job_packet_adapter.validate_python(data)


def create_job_packet(mode: str, **fields: Any) -> Union[BacktestNodePacket, LiveNodePacket]:
    """
    Create an empty packet for a run mode ('backtest' or 'live').

    Raises:
        ValueError: unknown mode
    """
    mode = mode.strip().lower()
    if mode == "backtest":
        return BacktestNodePacket(**fields)
    if mode == "live":
        return LiveNodePacket(**fields)
    raise ValueError(f"Unknown job mode: {mode!r} (expected 'backtest' or 'live')")
