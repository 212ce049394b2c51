"""Shared fixtures for the numeric tests."""

from __future__ import annotations

import pytest

import config
from randomness import RandomState


@pytest.fixture(autouse=True)
def restore_default_precision():
    """Undo any change a test makes to the process-wide float precision."""
    previous = config.get_default_precision()
    yield
    config.set_default_precision(previous)


@pytest.fixture
def mt_state() -> RandomState:
    return RandomState.mersenne_twister(seed=12345)


@pytest.fixture
def lc_state() -> RandomState:
    return RandomState.linear_congruential_size(seed=12345, size=32)


@pytest.fixture
def big() -> int:
    """A value spanning several limbs."""
    return 3**200 + 17
