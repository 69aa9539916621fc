"""Shared fixtures for router tests."""

import pytest

from ai_router import QLearningRouter, RouterConfig


@pytest.fixture
def router():
    """Router with default config and a fixed exploration seed."""
    return QLearningRouter(seed=1234)


@pytest.fixture
def greedy_router():
    """Router that never explores."""
    return QLearningRouter(exploration_initial=0.0, seed=1234)


@pytest.fixture
def small_config():
    """Config with a tiny table for eviction tests."""
    return RouterConfig(max_states=3, seed=1234)
