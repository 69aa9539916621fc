"""
Epsilon-greedy exploration schedule.
"""

import random

from .config import RouterConfig


class ExplorationPolicy:
    """
    Tracks the current exploration rate and decays it after each update.

    Epsilon starts at ``exploration_initial`` and shrinks multiplicatively
    towards the effective floor; it never increases except on ``reset``.
    """

    def __init__(self, config: RouterConfig, rng: random.Random | None = None) -> None:
        self._initial = config.exploration_initial
        self._decay = config.exploration_decay
        self._floor = config.effective_floor
        self._rng = rng or random.Random(config.seed)
        self.epsilon = self._initial

    @property
    def floor(self) -> float:
        return self._floor

    @property
    def rng(self) -> random.Random:
        """Random source shared with the router for action sampling."""
        return self._rng

    def should_explore(self, explore: bool) -> bool:
        """Return True when this decision should pick a random action."""
        if not explore:
            return False
        return self._rng.random() < self.epsilon

    def decay(self) -> float:
        """Apply one decay step and return the new epsilon."""
        self.epsilon = max(self._floor, self.epsilon * (1.0 - self._decay))
        return self.epsilon

    def reset(self) -> None:
        self.epsilon = self._initial
