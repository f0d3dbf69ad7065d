"""
Environment-driven settings for the stake pool bot.

Values are read once at import; a .env file in the working directory is
loaded first so it can provide any of them.
"""
import os

from dotenv import load_dotenv

from stakepool.addresses import STAKE_POOL_PROGRAM_ID as DEFAULT_STAKE_POOL_PROGRAM_ID

load_dotenv()

# Bot config file (JSON)
STAKE_POOL_CONF = os.getenv("STAKE_POOL_CONF", "./conf.json")

# Chain access
STAKE_POOL_PROGRAM_ID = os.getenv("STAKE_POOL_PROGRAM_ID", DEFAULT_STAKE_POOL_PROGRAM_ID)
RPC_COMMITMENT = os.getenv("RPC_COMMITMENT", "confirmed")
RPC_TIMEOUT_SECONDS = float(os.getenv("RPC_TIMEOUT_SECONDS", 30))

# spl-stake-pool CLI used to submit actions
SPL_STAKE_POOL_BIN = os.getenv("SPL_STAKE_POOL_BIN", "spl-stake-pool")
DISPATCH_TIMEOUT_SECONDS = float(os.getenv("DISPATCH_TIMEOUT_SECONDS", 120))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "stake_pool_bot.log")
