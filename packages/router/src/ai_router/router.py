"""
Q-learning task router.

Maps a free-text task description to one of a fixed set of routes and
learns from reward feedback which route works best for which context:

    router = QLearningRouter()
    decision = router.route("write unit tests for the parser")
    ...
    router.update("write unit tests for the parser", decision.route, reward=1.0)

The router is a plain object owned by its caller. It is not thread-safe;
share it between threads through ``SynchronizedRouter``.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from .backends import PythonBackend, ScoringBackend, load_backend
from .config import RouterConfig, RouterSettings, get_settings
from .exceptions import BackendLoadError
from .exploration import ExplorationPolicy
from .logging import configure_logging, get_logger
from .metrics import (
    q_table_import_skipped_total,
    q_table_states,
    router_rejected_rewards_total,
    router_td_error,
    router_unknown_actions_total,
    router_updates_total,
    routing_decisions_total,
    routing_epsilon,
)
from .persistence import PersistedTable, decode_table, encode_table, load_table
from .qtable import QTable
from .state_encoder import encode_state
from .stats import RouterStats, StatsTracker

logger = get_logger(__name__)

MAX_ALTERNATIVES = 3


@dataclass(frozen=True)
class Alternative:
    """A route that was not chosen, with its normalized score."""

    route: str
    score: float


@dataclass(frozen=True)
class RouteDecision:
    """Result of routing one context."""

    route: str
    confidence: float
    q_values: tuple[float, ...]
    explored: bool
    alternatives: tuple[Alternative, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Render in the external camelCase shape."""
        return {
            "route": self.route,
            "confidence": self.confidence,
            "qValues": list(self.q_values),
            "explored": self.explored,
            "alternatives": [
                {"route": alt.route, "score": alt.score} for alt in self.alternatives
            ],
        }


def _softmax(values: tuple[float, ...]) -> list[float]:
    peak = max(values)
    exps = [math.exp(v - peak) for v in values]
    total = sum(exps)
    return [e / total for e in exps]


def _confidence(values: tuple[float, ...], probs: list[float], index: int) -> float:
    """
    Softmax probability of the chosen action, rescaled so that a uniform
    distribution maps to 0 and certainty maps to 1.
    """
    if max(values) == min(values):
        return 0.0
    n = len(values)
    if n == 1:
        return 1.0
    uniform = 1.0 / n
    return min(1.0, max(0.0, (probs[index] - uniform) / (1.0 - uniform)))


class QLearningRouter:
    """
    Tabular Q-learning router with epsilon-greedy exploration.

    Each context is hashed to a state key; every state holds one value per
    route. ``route`` picks the best-valued route (or a random one while
    exploring) and ``update`` applies the TD rule

        Q[s, a] += learning_rate * (reward + gamma * max(Q[s']) - Q[s, a])

    with ``max(Q[s'])`` taken as 0 for terminal updates (no next context).
    """

    def __init__(
        self,
        config: RouterConfig | None = None,
        *,
        backend: ScoringBackend | None = None,
        name: str = "default",
        **overrides: Any,
    ) -> None:
        config = config or RouterConfig()
        if overrides:
            config = config.with_overrides(**overrides)

        self._config = config
        self.name = name
        self._route_names: tuple[str, ...] = tuple(config.route_names or ())
        self._action_index = {route: i for i, route in enumerate(self._route_names)}
        self._table = QTable(config.num_actions, config.max_states)
        self._policy = ExplorationPolicy(config)
        self._stats = StatsTracker()
        self._backend = backend or PythonBackend()
        self._log = logger.bind(router=name)

        self._publish_gauges()
        self._log.debug(
            "Router created",
            routes=list(self._route_names),
            max_states=config.max_states,
            backend=self._backend.name,
        )

    @classmethod
    def from_settings(
        cls,
        settings: RouterSettings | None = None,
        *,
        name: str = "default",
        setup_logging: bool = False,
    ) -> "QLearningRouter":
        """
        Build a router from environment settings and activate its backend.

        If ``settings.state_file`` names an existing file, the Q-table is
        restored from it. With ``setup_logging`` the process-wide structlog
        configuration is applied from the logging settings first.

        Raises:
            InvalidConfigError: If a setting is out of range
            PersistenceError: If the state file exists but cannot be read
        """
        settings = settings or get_settings()
        if setup_logging:
            configure_logging(
                log_level=settings.log_level,
                log_format=settings.log_format,
                service_name=settings.service_name,
            )
        router = cls(settings.to_router_config(), name=name)
        router.initialize(settings)
        if settings.state_file and Path(settings.state_file).exists():
            router.import_table(load_table(settings.state_file))
        return router

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> RouterConfig:
        return self._config

    @property
    def route_names(self) -> tuple[str, ...]:
        return self._route_names

    @property
    def epsilon(self) -> float:
        return self._policy.epsilon

    @property
    def use_native(self) -> bool:
        return self._backend.is_native

    # ------------------------------------------------------------------
    # Backend
    # ------------------------------------------------------------------

    def initialize(self, settings: RouterSettings | None = None) -> bool:
        """
        Activate the native backend named in settings, if any.

        A backend that fails to load is logged and the current backend
        stays active.

        Returns:
            True if a native backend is active afterwards
        """
        settings = settings or get_settings()
        path = settings.native_backend
        if not path:
            self._log.debug("No native backend configured", backend=self._backend.name)
            return self.use_native

        try:
            self._backend = load_backend(path)
        except BackendLoadError as e:
            self._log.warning(
                "Native backend unavailable, keeping current backend",
                path=path,
                backend=self._backend.name,
                error=e.message,
            )
        return self.use_native

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def route(self, context: str, explore: bool = True) -> RouteDecision:
        """
        Choose a route for ``context``.

        First sight of a context creates its (all-zero) row in the table.

        Args:
            context: Task description
            explore: Allow epsilon-greedy exploration; False always exploits

        Returns:
            RouteDecision with a snapshot of the state's Q-values
        """
        entry = self._table.get_or_create(encode_state(context))

        explored = self._policy.should_explore(explore)
        if explored:
            index = self._policy.rng.randrange(self._config.num_actions)
        else:
            index = self._backend.best_action(entry.q_values)

        q_values = tuple(entry.q_values)
        probs = _softmax(q_values)
        ranked = sorted(
            (i for i in range(len(q_values)) if i != index),
            key=lambda i: (-probs[i], i),
        )
        alternatives = tuple(
            Alternative(route=self._route_names[i], score=probs[i])
            for i in ranked[:MAX_ALTERNATIVES]
        )

        self._stats.record_step()
        route = self._route_names[index]
        routing_decisions_total.labels(route=route, explored=str(explored).lower()).inc()
        q_table_states.labels(router=self.name).set(len(self._table))

        return RouteDecision(
            route=route,
            confidence=_confidence(q_values, probs, index),
            q_values=q_values,
            explored=explored,
            alternatives=alternatives,
        )

    # ------------------------------------------------------------------
    # Learning
    # ------------------------------------------------------------------

    def _resolve_action(self, action: Any) -> int | None:
        if isinstance(action, Enum):
            action = action.value
        if isinstance(action, str):
            return self._action_index.get(action)
        if isinstance(action, int) and not isinstance(action, bool):
            if 0 <= action < self._config.num_actions:
                return action
        return None

    def update(
        self,
        context: str,
        action: Any,
        reward: float,
        next_context: str | None = None,
    ) -> float:
        """
        Apply one Q-learning update for a past decision.

        Args:
            context: Task description that was routed
            action: Route name, Route member or route index that was taken
            reward: Observed reward for that decision
            next_context: Successor context; None marks a terminal transition

        Returns:
            The TD error, or 0.0 if ``action`` is not a configured route or
            ``reward`` is not a finite number (nothing is changed then)
        """
        index = self._resolve_action(action)
        if index is None:
            router_unknown_actions_total.inc()
            self._log.warning(
                "Ignoring update for unknown action",
                action=str(action),
                routes=list(self._route_names),
            )
            return 0.0

        try:
            reward = float(reward)
        except (TypeError, ValueError):
            reward = math.nan
        if not math.isfinite(reward):
            router_rejected_rewards_total.inc()
            self._log.warning(
                "Ignoring update with non-finite reward",
                action=self._route_names[index],
                reward=str(reward),
            )
            return 0.0

        key = encode_state(context)
        entry = self._table.get_or_create(key)

        bootstrap = 0.0
        if next_context is not None:
            next_entry = self._table.get(encode_state(next_context))
            if next_entry is not None:
                bootstrap = max(next_entry.q_values)

        target = reward + self._config.gamma * bootstrap
        td_error = self._backend.apply_td(
            entry.q_values, index, target, self._config.learning_rate
        )

        entry.visits += 1
        self._stats.record_update(td_error)
        self._policy.decay()
        self._table.enforce_capacity(protect=key)

        router_updates_total.labels(route=self._route_names[index]).inc()
        router_td_error.observe(abs(td_error))
        self._publish_gauges()
        return td_error

    # ------------------------------------------------------------------
    # Stats and lifecycle
    # ------------------------------------------------------------------

    def get_stats(self) -> RouterStats:
        return self._stats.snapshot(
            q_table_size=len(self._table),
            epsilon=self._policy.epsilon,
            use_native=self.use_native,
        )

    def reset(self) -> None:
        """Forget everything learned: empty table, zero counters, initial epsilon."""
        self._table.clear()
        self._stats.reset()
        self._policy.reset()
        self._publish_gauges()
        self._log.info("Router reset")

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def export_table(self) -> PersistedTable:
        """Snapshot the Q-table as ``{state: {"qValues": [...], "visits": n}}``."""
        return encode_table(self._table.items())

    def import_table(self, data: Mapping[str, Any]) -> int:
        """
        Replace the Q-table with ``data``.

        Entries whose value vector does not match the configured number of
        routes (or that are otherwise malformed) are skipped. Counters and
        epsilon are left as they are.

        Returns:
            Number of states installed
        """
        if not isinstance(data, Mapping):
            self._log.warning(
                "Ignoring Q-table import that is not a mapping",
                type=type(data).__name__,
            )
            return len(self._table)

        result = decode_table(data, self._config.num_actions)
        self._table.replace(result.entries)

        if result.skipped:
            q_table_import_skipped_total.inc(len(result.skipped))
        self._publish_gauges()
        self._log.info(
            "Imported Q-table",
            states=len(self._table),
            skipped=len(result.skipped),
        )
        return len(self._table)

    export = export_table
    import_ = import_table

    def close(self) -> None:
        """
        Drop this router's labelled gauge series.

        Call when a router is discarded so per-router series do not
        accumulate. The router stays usable; the next change republishes
        its gauges.
        """
        for gauge in (q_table_states, routing_epsilon):
            try:
                gauge.remove(self.name)
            except KeyError:
                pass
        self._log.debug("Router gauges removed")

    def _publish_gauges(self) -> None:
        q_table_states.labels(router=self.name).set(len(self._table))
        routing_epsilon.labels(router=self.name).set(self._policy.epsilon)


def create_router(config: RouterConfig | None = None, **overrides: Any) -> QLearningRouter:
    """Create a router with the given config and/or field overrides."""
    return QLearningRouter(config, **overrides)
