"""
Tests for the epoch window gate and the reserve threshold arithmetic.
"""
import pytest
from pydantic import ValidationError

from pool_bot.models.decision import EpochWindow
from pool_bot.orchestrator.reserve import eligible_amount, reserve_floor
from pool_bot.orchestrator.window import is_within_window
from pool_bot.utils.units import MIN_STAKE_BALANCE


def _window(slots_remaining: int, threshold: int, slots_in_epoch: int = 432_000) -> EpochWindow:
    return EpochWindow(
        current_slot_index=slots_in_epoch - slots_remaining,
        slots_in_epoch=slots_in_epoch,
        left_epoch_threshold=threshold,
    )


class TestEpochWindow:
    """Tests for is_within_window."""

    def test_inside_window(self):
        assert is_within_window(_window(slots_remaining=150, threshold=200)) is True

    def test_outside_window(self):
        assert is_within_window(_window(slots_remaining=300, threshold=200)) is False

    def test_boundary_equality_triggers(self):
        assert is_within_window(_window(slots_remaining=200, threshold=200)) is True
        assert is_within_window(_window(slots_remaining=201, threshold=200)) is False

    def test_zero_threshold_only_at_epoch_end(self):
        assert is_within_window(_window(slots_remaining=0, threshold=0)) is True
        assert is_within_window(_window(slots_remaining=1, threshold=0)) is False

    @pytest.mark.parametrize("slot_index", [0, 1, 215_999, 431_799, 431_800, 431_999])
    def test_matches_slots_remaining_rule(self, slot_index):
        window = EpochWindow(
            current_slot_index=slot_index, slots_in_epoch=432_000, left_epoch_threshold=200
        )
        assert window.slots_remaining == 432_000 - slot_index
        assert is_within_window(window) is (432_000 - slot_index <= 200)

    def test_slot_index_beyond_epoch_rejected(self):
        with pytest.raises(ValidationError):
            EpochWindow(current_slot_index=432_001, slots_in_epoch=432_000, left_epoch_threshold=200)

    def test_window_is_immutable(self):
        window = _window(slots_remaining=150, threshold=200)
        with pytest.raises(ValidationError):
            window.left_epoch_threshold = 0


class TestReserveThreshold:
    """Tests for reserve_floor and eligible_amount."""

    def test_floor_is_two_rent_plus_buffer(self):
        assert reserve_floor(2_000_000, 1_000_000_000) == 1_004_000_000

    def test_scenario_amount(self):
        assert eligible_amount(5_000_000_000, 2_000_000, 1_000_000_000) == 3_996_000_000

    def test_equal_to_floor_is_not_eligible(self):
        assert eligible_amount(1_004_000_000, 2_000_000, 1_000_000_000) is None

    def test_one_above_floor(self):
        assert eligible_amount(1_004_000_001, 2_000_000, 1_000_000_000) == 1

    def test_below_floor_and_empty_reserve(self):
        assert eligible_amount(1_000_000_000, 2_000_000, 1_000_000_000) is None
        assert eligible_amount(0, 2_000_000, 1_000_000_000) is None

    def test_default_buffer_is_one_sol(self):
        assert MIN_STAKE_BALANCE == 1_000_000_000
