"""
Bot-specific models for one rebalance iteration.

Everything here is an immutable snapshot built fresh each loop iteration;
nothing is carried over between iterations.
"""
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

NO_ACTION_WINDOW = "window not reached"
NO_ACTION_RESERVE = "insufficient reserve"
NO_ACTION_ALL_BUSY = "all preferred validators busy"
NO_ACTION_NO_CANDIDATES = "no preferred validators configured"


class EpochWindow(BaseModel):
    """Position inside the current epoch plus the configured action threshold."""

    model_config = ConfigDict(frozen=True)

    current_slot_index: int = Field(..., ge=0)
    slots_in_epoch: int = Field(..., ge=0)
    left_epoch_threshold: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_slot_index(self) -> "EpochWindow":
        if self.slots_in_epoch < self.current_slot_index:
            raise ValueError(
                f"slot_index {self.current_slot_index} beyond slots_in_epoch "
                f"{self.slots_in_epoch}"
            )
        return self

    @property
    def slots_remaining(self) -> int:
        return self.slots_in_epoch - self.current_slot_index


class PoolState(BaseModel):
    model_config = ConfigDict(frozen=True)

    pool_address: str
    reserve_stake_address: str
    validator_list_address: str


class ReserveAccount(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    balance: int = Field(..., ge=0, description="Lamports")


class ValidatorCandidate(BaseModel):
    """A preferred validator, validated against the pool at startup."""

    model_config = ConfigDict(frozen=True)

    vote_account_address: str
    transient_stake_address: str
    in_pool: bool = Field(..., description="Listed in the pool validator list at startup")


class NoAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["no_action"] = "no_action"
    reason: str


class Increase(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["increase"] = "increase"
    target: ValidatorCandidate
    amount: int = Field(..., gt=0, description="Lamports to move from the reserve")


RebalanceDecision = Union[NoAction, Increase]


class IterationReport(BaseModel):
    """
    Outcome of one control loop iteration.

    Refresh and rebalance outcomes are recorded independently; `errors`
    maps the failing step ("refresh", "decide", "dispatch") to its message.
    """

    iteration: int
    refresh: Optional[Dict[str, Any]] = None
    rebalance_skipped: bool = False
    decision: Optional[RebalanceDecision] = None
    dispatch: Optional[Dict[str, Any]] = None
    errors: Dict[str, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors
