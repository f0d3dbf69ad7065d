"""
Shared test helpers and utilities for project-wide use.

Use these from conftest.py fixtures or individual tests.
"""
from __future__ import annotations

import json
import struct
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple
from unittest.mock import AsyncMock, MagicMock

from solders.keypair import Keypair
from solders.pubkey import Pubkey


# Ensure project root is on path when tests run
def _ensure_project_root() -> Path:
    root = Path(__file__).resolve().parent.parent
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    return root


def ensure_project_root() -> Path:
    """Add project root to sys.path. Idempotent. Returns root Path."""
    return _ensure_project_root()


ensure_project_root()

from pool_bot.models.decision import EpochWindow, PoolState, ReserveAccount  # noqa: E402
from stakepool import ValidatorList, ValidatorListHeader, AccountType  # noqa: E402
from stakepool import ValidatorStakeInfo, StakeStatus  # noqa: E402
from stakepool.addresses import find_transient_stake_address  # noqa: E402

# Values from the end-to-end scenarios
SLOTS_IN_EPOCH = 432_000
RENT_EXEMPT = 2_282_880
SCENARIO_RENT = 2_000_000
SCENARIO_MIN_STAKE = 1_000_000_000
PROGRAM_ID = "SPoo1Ku8WFXoNDMHPsrGSTSG1Y47rzgn41SLUNakuHy"


def make_address(seed: int) -> str:
    """Deterministic valid base58 address for tests."""
    return str(Pubkey.from_bytes(bytes([seed % 256]) * 32))


def transient_for(pool: str, vote: str) -> str:
    address, _ = find_transient_stake_address(PROGRAM_ID, vote, pool)
    return str(address)


class FakeChainReader:
    """
    In-memory ChainStateReader.

    Balances live in one dict keyed by address; every read is recorded in
    `balance_reads` so tests can check what was (and was not) queried.
    """

    def __init__(
        self,
        *,
        pool_address: str,
        reserve_address: str,
        validator_list_address: str,
        slot_index: int = SLOTS_IN_EPOCH - 150,
        slots_in_epoch: int = SLOTS_IN_EPOCH,
        rent_exempt: int = RENT_EXEMPT,
        balances: Optional[Dict[str, int]] = None,
        validator_list: Optional[ValidatorList] = None,
    ):
        self.pool_address = pool_address
        self.reserve_address = reserve_address
        self.validator_list_address = validator_list_address
        self.slot_index = slot_index
        self.slots_in_epoch = slots_in_epoch
        self.rent_exempt = rent_exempt
        self.balances: Dict[str, int] = dict(balances or {})
        self.validator_list = validator_list or ValidatorList(
            header=ValidatorListHeader(account_type=AccountType.VALIDATOR_LIST, max_validators=10)
        )
        self.balance_reads: List[str] = []
        self.closed = False

    async def get_epoch_window(self, left_epoch_threshold: int) -> EpochWindow:
        return EpochWindow(
            current_slot_index=self.slot_index,
            slots_in_epoch=self.slots_in_epoch,
            left_epoch_threshold=left_epoch_threshold,
        )

    async def get_balance(self, address: str) -> int:
        self.balance_reads.append(address)
        return self.balances.get(address, 0)

    async def is_transient_busy(self, address: str) -> bool:
        return await self.get_balance(address) > 0

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        return self.rent_exempt

    async def get_pool_state(self, pool_address: str) -> PoolState:
        return PoolState(
            pool_address=pool_address,
            reserve_stake_address=self.reserve_address,
            validator_list_address=self.validator_list_address,
        )

    async def get_reserve_account(self, pool_state: PoolState) -> ReserveAccount:
        balance = await self.get_balance(pool_state.reserve_stake_address)
        return ReserveAccount(address=pool_state.reserve_stake_address, balance=balance)

    async def get_validator_list(self, address: str) -> ValidatorList:
        return self.validator_list

    def transient_stake_address(self, pool_address: str, vote_account_address: str) -> str:
        return transient_for(pool_address, vote_account_address)

    async def aclose(self) -> None:
        self.closed = True


def build_validator_list(vote_accounts: Sequence[str], max_validators: int = 10) -> ValidatorList:
    return ValidatorList(
        header=ValidatorListHeader(
            account_type=AccountType.VALIDATOR_LIST, max_validators=max_validators
        ),
        validators=[
            ValidatorStakeInfo(
                active_stake_lamports=5_000_000_000,
                transient_stake_lamports=0,
                last_update_epoch=300,
                status=StakeStatus.ACTIVE,
                vote_account_address=vote,
            )
            for vote in vote_accounts
        ],
    )


def build_mock_dispatcher(success: bool = True) -> MagicMock:
    """MagicMock ActionDispatcher whose calls resolve to result dicts."""
    dispatcher = MagicMock()
    dispatcher.refresh_pool = AsyncMock(
        return_value={
            "success": success,
            "command": "spl-stake-pool update",
            "stdout": "",
            "error": None if success else "update failed",
        }
    )
    dispatcher.increase_validator_stake = AsyncMock(
        return_value={
            "success": success,
            "command": "spl-stake-pool increase-validator-stake",
            "stdout": "",
            "error": None if success else "increase failed",
        }
    )
    return dispatcher


def write_solana_files(
    directory: Path,
    rpc_url: str = "http://localhost:8899",
) -> Tuple[Path, Keypair]:
    """Write a Solana CLI config.yml and keypair file; return (config path, keypair)."""
    keypair = Keypair()
    keypair_path = directory / "id.json"
    keypair_path.write_text(json.dumps(list(bytes(keypair))))
    config_path = directory / "config.yml"
    config_path.write_text(
        f"json_rpc_url: \"{rpc_url}\"\n"
        f"websocket_url: \"\"\n"
        f"keypair_path: {keypair_path}\n"
        f"commitment: confirmed\n"
    )
    return config_path, keypair


# Borsh encoders mirroring stakepool.layout, used to build account data


def _pk(address: str) -> bytes:
    return bytes(Pubkey.from_string(address))


def _fee(denominator: int, numerator: int) -> bytes:
    return struct.pack("<QQ", denominator, numerator)


def encode_stake_pool(
    *,
    validator_list: str,
    reserve_stake: str,
    preferred_deposit: Optional[str] = None,
    total_stake_lamports: int = 10_000_000_000,
    account_type: int = 1,
) -> bytes:
    out = bytes([account_type])
    out += _pk(make_address(11)) + _pk(make_address(12)) + _pk(make_address(13))
    out += bytes([255])
    out += _pk(validator_list) + _pk(reserve_stake)
    out += _pk(make_address(14)) + _pk(make_address(15)) + _pk(make_address(16))
    out += struct.pack("<QQQ", total_stake_lamports, 9_000_000_000, 300)
    out += struct.pack("<qQ", 0, 0) + _pk(make_address(17))
    out += _fee(100, 3)
    out += b"\x00"
    out += (b"\x01" + _pk(preferred_deposit)) if preferred_deposit else b"\x00"
    out += b"\x00"
    out += _fee(0, 0) + _fee(1000, 1)
    out += b"\x00"
    out += bytes([0])
    out += b"\x00"
    out += _fee(0, 0)
    out += bytes([0])
    return out


def encode_validator_list(
    validators: Sequence[Tuple[str, int, int]],
    max_validators: int = 10,
    account_type: int = 2,
) -> bytes:
    """validators: (vote account, active lamports, transient lamports)."""
    out = bytes([account_type]) + struct.pack("<II", max_validators, len(validators))
    for vote, active, transient in validators:
        out += struct.pack("<QQQ", active, transient, 300) + bytes([0]) + _pk(vote)
    return out
