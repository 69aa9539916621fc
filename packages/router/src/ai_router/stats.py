"""
Running counters for a router.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RouterStats:
    """Point-in-time view of a router's counters."""

    update_count: int
    q_table_size: int
    epsilon: float
    avg_td_error: float
    step_count: int
    use_native: bool

    def to_dict(self) -> dict[str, Any]:
        """Render in the external camelCase shape."""
        return {
            "updateCount": self.update_count,
            "qTableSize": self.q_table_size,
            "epsilon": self.epsilon,
            "avgTDError": self.avg_td_error,
            "stepCount": self.step_count,
            "useNative": self.use_native,
        }


class StatsTracker:
    """Counts updates and routing steps and averages TD error magnitude."""

    def __init__(self) -> None:
        self.update_count = 0
        self.step_count = 0
        self._td_error_total = 0.0

    @property
    def avg_td_error(self) -> float:
        if self.update_count == 0:
            return 0.0
        return self._td_error_total / self.update_count

    def record_step(self) -> None:
        self.step_count += 1

    def record_update(self, td_error: float) -> None:
        self.update_count += 1
        self._td_error_total += abs(td_error)

    def reset(self) -> None:
        self.update_count = 0
        self.step_count = 0
        self._td_error_total = 0.0

    def snapshot(self, q_table_size: int, epsilon: float, use_native: bool) -> RouterStats:
        return RouterStats(
            update_count=self.update_count,
            q_table_size=q_table_size,
            epsilon=epsilon,
            avg_td_error=self.avg_td_error,
            step_count=self.step_count,
            use_native=use_native,
        )
