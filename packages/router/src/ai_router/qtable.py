"""
Bounded state -> action-value table.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from .logging import get_logger
from .metrics import q_table_evictions_total

logger = get_logger(__name__)


@dataclass
class QTableEntry:
    """Action values and visit count for one state."""

    q_values: list[float]
    visits: int = 0
    seq: int = field(default=0, compare=False)  # Insertion order, for eviction ties


class QTable:
    """
    Mapping from state key to a fixed-length Q-value vector.

    Rows are created lazily and zero-initialised. Capacity is enforced on
    every insertion by evicting the least-visited row, oldest first on ties,
    never the row that triggered the insertion.
    """

    def __init__(self, num_actions: int, max_states: int) -> None:
        self.num_actions = num_actions
        self.max_states = max_states
        self._entries: dict[str, QTableEntry] = {}
        self._next_seq = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def items(self) -> Iterator[tuple[str, QTableEntry]]:
        return iter(list(self._entries.items()))

    def get(self, key: str) -> QTableEntry | None:
        """Look up a row without creating it."""
        return self._entries.get(key)

    def get_or_create(self, key: str) -> QTableEntry:
        """Return the row for ``key``, inserting a zero row if needed."""
        entry = self._entries.get(key)
        if entry is not None:
            return entry

        entry = QTableEntry(q_values=[0.0] * self.num_actions, seq=self._take_seq())
        self._entries[key] = entry
        self.enforce_capacity(protect=key)
        return entry

    def enforce_capacity(self, protect: str | None = None) -> int:
        """
        Evict rows until the table fits ``max_states``.

        Returns:
            Number of rows evicted
        """
        evicted = 0
        while len(self._entries) > self.max_states:
            victim = self._pick_victim(protect)
            if victim is None:
                break
            del self._entries[victim]
            evicted += 1

        if evicted:
            q_table_evictions_total.inc(evicted)
            logger.debug("Evicted Q-table states", evicted=evicted, size=len(self._entries))
        return evicted

    def _pick_victim(self, protect: str | None) -> str | None:
        victim: str | None = None
        victim_rank: tuple[int, int] | None = None
        for key, entry in self._entries.items():
            if key == protect:
                continue
            rank = (entry.visits, entry.seq)
            if victim_rank is None or rank < victim_rank:
                victim, victim_rank = key, rank
        return victim

    def replace(self, entries: Iterable[tuple[str, list[float], int]]) -> None:
        """
        Swap in a new set of rows in one step.

        Rows are inserted in the given order; if there are more than
        ``max_states`` of them the least-visited ones are dropped.
        """
        fresh: dict[str, QTableEntry] = {}
        seq = 0
        for key, q_values, visits in entries:
            fresh[key] = QTableEntry(q_values=list(q_values), visits=visits, seq=seq)
            seq += 1

        self._entries = fresh
        self._next_seq = seq
        self.enforce_capacity()

    def clear(self) -> None:
        self._entries = {}
        self._next_seq = 0

    def _take_seq(self) -> int:
        seq = self._next_seq
        self._next_seq += 1
        return seq
