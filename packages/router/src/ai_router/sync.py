"""
Thread-safe access to a shared router.
"""

import threading
from collections.abc import Mapping
from typing import Any

from .config import RouterSettings
from .persistence import PersistedTable
from .router import QLearningRouter, RouteDecision
from .stats import RouterStats


class SynchronizedRouter:
    """
    Serializes every operation on a QLearningRouter behind one lock.

    ``update`` is a read-modify-write on a shared Q-value row, and
    ``export_table``/``import_table`` must not interleave with routing, so
    all calls go through the same re-entrant lock.
    """

    def __init__(self, router: QLearningRouter | None = None) -> None:
        self._router = router or QLearningRouter()
        self._lock = threading.RLock()

    @property
    def router(self) -> QLearningRouter:
        """The wrapped router. Callers must not use it without holding ``lock``."""
        return self._router

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def initialize(self, settings: RouterSettings | None = None) -> bool:
        with self._lock:
            return self._router.initialize(settings)

    def route(self, context: str, explore: bool = True) -> RouteDecision:
        with self._lock:
            return self._router.route(context, explore)

    def update(
        self,
        context: str,
        action: Any,
        reward: float,
        next_context: str | None = None,
    ) -> float:
        with self._lock:
            return self._router.update(context, action, reward, next_context)

    def get_stats(self) -> RouterStats:
        with self._lock:
            return self._router.get_stats()

    def reset(self) -> None:
        with self._lock:
            self._router.reset()

    def close(self) -> None:
        with self._lock:
            self._router.close()

    def export_table(self) -> PersistedTable:
        with self._lock:
            return self._router.export_table()

    def import_table(self, data: Mapping[str, Any]) -> int:
        with self._lock:
            return self._router.import_table(data)

    export = export_table
    import_ = import_table
