"""
Project-wide pytest fixtures.

Use these across test modules. Helpers live in tests.common.
"""
from __future__ import annotations

import pytest

# Ensure project root on path before any local imports
from tests.common import (
    FakeChainReader,
    build_mock_dispatcher,
    ensure_project_root,
    make_address,
    transient_for,
)

ensure_project_root()

from pool_bot.models.decision import ValidatorCandidate  # noqa: E402


@pytest.fixture
def pool_address() -> str:
    return make_address(1)


@pytest.fixture
def reserve_address() -> str:
    return make_address(2)


@pytest.fixture
def validator_list_address() -> str:
    return make_address(3)


@pytest.fixture
def vote_accounts():
    """Three preferred vote accounts in priority order (X, Y, Z)."""
    return [make_address(21), make_address(22), make_address(23)]


@pytest.fixture
def candidates(pool_address, vote_accounts):
    return [
        ValidatorCandidate(
            vote_account_address=vote,
            transient_stake_address=transient_for(pool_address, vote),
            in_pool=True,
        )
        for vote in vote_accounts
    ]


@pytest.fixture
def reader(pool_address, reserve_address, validator_list_address) -> FakeChainReader:
    return FakeChainReader(
        pool_address=pool_address,
        reserve_address=reserve_address,
        validator_list_address=validator_list_address,
    )


@pytest.fixture
def dispatcher():
    return build_mock_dispatcher()
