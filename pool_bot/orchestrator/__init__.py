"""
Orchestrator: the rebalance decision and the loop that drives it.

- window: epoch window gate
- reserve: reserve threshold arithmetic
- selector: first non-busy preferred validator
- engine: decision engine composing the three
- loop: periodic refresh + rebalance with per-iteration failure isolation
"""
from pool_bot.orchestrator.engine import RebalanceEngine
from pool_bot.orchestrator.loop import ControlLoop
from pool_bot.orchestrator.reserve import eligible_amount, reserve_floor
from pool_bot.orchestrator.selector import make_transient_busy_check, select_candidate
from pool_bot.orchestrator.window import is_within_window

__all__ = [
    "RebalanceEngine",
    "ControlLoop",
    "eligible_amount",
    "reserve_floor",
    "make_transient_busy_check",
    "select_candidate",
    "is_within_window",
]
