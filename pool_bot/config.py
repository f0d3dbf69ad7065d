"""
Bot configuration file.

Example:
{
  "solana_config_path": "/home/foo/.config/solana/cli/config.yml",
  "stake_pool_address": "some_pool_address",
  "rebalance_left_epoch": 200,
  "preferred_vote_accounts": ["first_vote_account", "second_vote_account"],
  "dry_run": false,
  "loop_second": 60,
  "disable_rebalance": false
}
"""
import json
from pathlib import Path
from typing import Any, Dict, List

from pydantic import BaseModel, Field, ValidationError, model_validator


class ConfigUnreadableError(OSError):
    """Config file missing or unreadable."""


class ConfigInvalidError(ValueError):
    """Config file is not valid JSON or fails validation."""


class BotConf(BaseModel):
    solana_config_path: str = Field("", description="Solana CLI config.yml (RPC URL, keypair)")
    stake_pool_address: str = Field(..., min_length=1)
    rebalance_left_epoch: int = Field(..., ge=0, description="Slots left in epoch to start rebalancing")
    preferred_vote_accounts: List[str] = Field(
        default_factory=list, description="Vote accounts in priority order"
    )
    dry_run: bool = False
    loop_second: int = Field(60, gt=0)
    disable_rebalance: bool = False
    update_force: bool = False
    update_no_merge: bool = False

    @model_validator(mode="before")
    @classmethod
    def fold_single_preferred_vote_account(cls, data: Any) -> Any:
        """Accept the single-validator `preferred_vote_account` key of older configs."""
        if not isinstance(data, dict) or "preferred_vote_account" not in data:
            return data
        data = dict(data)
        single = data.pop("preferred_vote_account")
        accounts = list(data.get("preferred_vote_accounts") or [])
        if single and single not in accounts:
            accounts.insert(0, single)
        data["preferred_vote_accounts"] = accounts
        return data

    @model_validator(mode="after")
    def check_unique_vote_accounts(self) -> "BotConf":
        if len(set(self.preferred_vote_accounts)) != len(self.preferred_vote_accounts):
            raise ValueError("preferred_vote_accounts contains duplicates")
        return self


def load_bot_config(path: str) -> BotConf:
    """
    Read and validate the bot config file.

    Raises:
        ConfigUnreadableError: File missing or unreadable.
        ConfigInvalidError: Not JSON or not a valid BotConf.
    """
    conf_path = Path(path).expanduser()
    try:
        text = conf_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigUnreadableError(f"Unable to read bot config {conf_path}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigInvalidError(f"Bot config {conf_path} is not valid JSON: {e}") from e

    try:
        return BotConf.model_validate(data)
    except ValidationError as e:
        raise ConfigInvalidError(f"Bot config {conf_path} is invalid: {e}") from e


def example_config() -> Dict[str, Any]:
    conf = BotConf(
        solana_config_path="/home/foo/.config/solana/cli/config.yml",
        stake_pool_address="some_pool_address",
        rebalance_left_epoch=200,
        preferred_vote_accounts=["preferred_vote_account"],
        dry_run=False,
        loop_second=60,
        disable_rebalance=False,
    )
    return conf.model_dump()
