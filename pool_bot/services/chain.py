"""
Read-only Solana JSON-RPC access for the bot.

Wraps the handful of RPC methods the rebalance decision needs and decodes
stake pool accounts into stakepool models.
"""
import base64
import itertools
import logging
from typing import Any, Dict, List, Optional

import httpx

from pool_bot.models.decision import EpochWindow, PoolState, ReserveAccount
from pool_bot.utils.env import (
    RPC_COMMITMENT,
    RPC_TIMEOUT_SECONDS,
    STAKE_POOL_PROGRAM_ID,
)
from stakepool import (
    StakePool,
    ValidatorList,
    decode_stake_pool,
    decode_validator_list,
    find_transient_stake_address,
)

logger = logging.getLogger(__name__)


class RpcError(RuntimeError):
    """JSON-RPC call returned an error object or an unusable result."""

    def __init__(self, method: str, message: str, code: Optional[int] = None):
        self.method = method
        self.code = code
        super().__init__(f"{method} failed: {message}" + (f" (code {code})" if code is not None else ""))


class AccountNotFoundError(RpcError):
    """Requested account does not exist on chain."""


class ChainStateReader:
    """
    Read-only view of the ledger.

    Every method performs fresh RPC calls; nothing is cached between calls
    because reserve and transient balances change between iterations.
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        commitment: str = RPC_COMMITMENT,
        timeout: float = RPC_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
        program_id: str = STAKE_POOL_PROGRAM_ID,
    ):
        """
        Initialize the reader.

        Args:
            rpc_url: JSON-RPC endpoint
            commitment: Commitment level for all queries
            timeout: Per-request timeout in seconds
            client: Optional preconfigured httpx client (tests pass a MockTransport one)
            program_id: Stake pool program used to derive transient addresses
        """
        self.rpc_url = rpc_url
        self.commitment = commitment
        self.program_id = program_id
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._ids = itertools.count(1)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }
        response = await self._client.post(self.rpc_url, json=payload)
        response.raise_for_status()
        try:
            body = response.json()
        except ValueError as e:
            raise RpcError(method, f"invalid JSON-RPC response: {e}") from e
        if not isinstance(body, dict):
            raise RpcError(method, "invalid JSON-RPC response: not an object")
        if body.get("error") is not None:
            error = body["error"]
            if isinstance(error, dict):
                raise RpcError(method, error.get("message", str(error)), error.get("code"))
            raise RpcError(method, str(error))
        if "result" not in body:
            raise RpcError(method, "response has no result")
        return body["result"]

    async def _call_with_context(self, method: str, params: List[Any]) -> Any:
        """Methods answering {"context": ..., "value": ...}; returns value."""
        result = await self._call(method, params)
        if not isinstance(result, dict) or "value" not in result:
            raise RpcError(method, f"unexpected result {result!r}")
        return result["value"]

    async def get_epoch_info(self) -> Dict[str, Any]:
        return await self._call("getEpochInfo", [{"commitment": self.commitment}])

    async def get_epoch_window(self, left_epoch_threshold: int) -> EpochWindow:
        info = await self.get_epoch_info()
        try:
            slot_index, slots_in_epoch = info["slotIndex"], info["slotsInEpoch"]
        except (KeyError, TypeError) as e:
            raise RpcError("getEpochInfo", f"unexpected result {info!r}") from e
        return EpochWindow(
            current_slot_index=slot_index,
            slots_in_epoch=slots_in_epoch,
            left_epoch_threshold=left_epoch_threshold,
        )

    async def get_balance(self, address: str) -> int:
        """Lamports held by address; 0 for accounts that do not exist."""
        value = await self._call_with_context(
            "getBalance", [address, {"commitment": self.commitment}]
        )
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise RpcError("getBalance", f"unexpected balance {value!r}") from e

    async def get_account_data(self, address: str) -> Optional[bytes]:
        """Raw account data, or None if the account does not exist."""
        value = await self._call_with_context(
            "getAccountInfo",
            [address, {"encoding": "base64", "commitment": self.commitment}],
        )
        if value is None:
            return None
        try:
            data, encoding = value["data"]
        except (KeyError, TypeError, ValueError) as e:
            raise RpcError("getAccountInfo", f"unexpected account {value!r}") from e
        if encoding != "base64":
            raise RpcError("getAccountInfo", f"unexpected encoding {encoding}")
        try:
            return base64.b64decode(data, validate=True)
        except (TypeError, ValueError) as e:
            raise RpcError("getAccountInfo", f"undecodable account data: {e}") from e

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        result = await self._call(
            "getMinimumBalanceForRentExemption", [size, {"commitment": self.commitment}]
        )
        return int(result)

    async def get_stake_pool(self, pool_address: str) -> StakePool:
        data = await self.get_account_data(pool_address)
        if data is None:
            raise AccountNotFoundError("getAccountInfo", f"stake pool {pool_address} not found")
        return decode_stake_pool(data)

    async def get_validator_list(self, validator_list_address: str) -> ValidatorList:
        data = await self.get_account_data(validator_list_address)
        if data is None:
            raise AccountNotFoundError(
                "getAccountInfo", f"validator list {validator_list_address} not found"
            )
        return decode_validator_list(data)

    async def get_pool_state(self, pool_address: str) -> PoolState:
        pool = await self.get_stake_pool(pool_address)
        return PoolState(
            pool_address=pool_address,
            reserve_stake_address=pool.reserve_stake,
            validator_list_address=pool.validator_list,
        )

    async def get_reserve_account(self, pool_state: PoolState) -> ReserveAccount:
        balance = await self.get_balance(pool_state.reserve_stake_address)
        return ReserveAccount(address=pool_state.reserve_stake_address, balance=balance)

    def transient_stake_address(self, pool_address: str, vote_account_address: str) -> str:
        address, _bump = find_transient_stake_address(
            self.program_id, vote_account_address, pool_address
        )
        return str(address)

    async def is_transient_busy(self, transient_stake_address: str) -> bool:
        """True while the transient stake account exists with a positive balance."""
        return await self.get_balance(transient_stake_address) > 0
