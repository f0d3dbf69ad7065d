"""
Solana CLI configuration and keypair loading.

The bot shares the Solana CLI's config.yml so the RPC endpoint and signing
identity match what the spl-stake-pool CLI uses for dispatch.
"""
import json
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel
from solders.keypair import Keypair

logger = logging.getLogger(__name__)

DEFAULT_JSON_RPC_URL = "https://api.mainnet-beta.solana.com"
DEFAULT_KEYPAIR_PATH = "~/.config/solana/id.json"


class SolanaConfigError(ValueError):
    """Solana CLI config or keypair cannot be used."""


class SolanaCliConfig(BaseModel):
    json_rpc_url: str = DEFAULT_JSON_RPC_URL
    keypair_path: str = DEFAULT_KEYPAIR_PATH


def load_solana_config(path: Optional[str]) -> SolanaCliConfig:
    """
    Load a Solana CLI config.yml.

    An empty path or a missing file falls back to the CLI defaults, the same
    way `solana` itself behaves. A file that exists but cannot be parsed is
    an error.
    """
    if not path:
        return SolanaCliConfig()

    config_path = Path(path).expanduser()
    if not config_path.is_file():
        logger.warning(f"Solana config {config_path} not found, using defaults")
        return SolanaCliConfig()

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise SolanaConfigError(f"Unable to parse Solana config {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise SolanaConfigError(f"Solana config {config_path} must be a mapping")

    defaults = SolanaCliConfig()
    return SolanaCliConfig(
        json_rpc_url=data.get("json_rpc_url") or defaults.json_rpc_url,
        keypair_path=data.get("keypair_path") or defaults.keypair_path,
    )


def load_keypair(path: str) -> Keypair:
    """Read a keypair file written by solana-keygen (JSON array of 64 bytes)."""
    keypair_path = Path(path).expanduser()
    try:
        with open(keypair_path, "r") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SolanaConfigError(f"Unable to read keypair {keypair_path}: {e}") from e

    if not isinstance(raw, list) or len(raw) != 64:
        raise SolanaConfigError(f"Keypair {keypair_path} must hold a 64 byte array")
    try:
        return Keypair.from_bytes(bytes(raw))
    except (TypeError, ValueError) as e:
        raise SolanaConfigError(f"Invalid keypair {keypair_path}: {e}") from e
