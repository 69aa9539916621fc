"""
AI Router Package - Adaptive Q-learning task routing for AI Infrastructure.

This package decides which worker role should handle a task:
- Context hashing to compact state keys
- Tabular Q-learning with epsilon-greedy exploration
- Bounded Q-table with least-visited eviction
- Stable export/import format for persistence
- Structured logging, settings and Prometheus metrics
"""

from .backends import PythonBackend, ScoringBackend, load_backend
from .config import RouterConfig, RouterSettings, get_settings, reload_settings
from .enums import DEFAULT_ROUTE_NAMES, Route, default_route_names
from .exceptions import (
    BackendLoadError,
    ConfigurationError,
    InvalidConfigError,
    PersistenceError,
    RouterError,
)
from .exploration import ExplorationPolicy
from .logging import configure_logging, get_logger
from .persistence import (
    DecodeResult,
    PersistedEntry,
    PersistedTable,
    decode_table,
    encode_table,
    load_table,
    save_table,
)
from .qtable import QTable, QTableEntry
from .router import Alternative, QLearningRouter, RouteDecision, create_router
from .state_encoder import encode_state, hash_context
from .stats import RouterStats, StatsTracker
from .sync import SynchronizedRouter

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Router
    "QLearningRouter",
    "SynchronizedRouter",
    "RouteDecision",
    "Alternative",
    "create_router",
    # Routes
    "Route",
    "DEFAULT_ROUTE_NAMES",
    "default_route_names",
    # Config
    "RouterConfig",
    "RouterSettings",
    "get_settings",
    "reload_settings",
    # Components
    "ExplorationPolicy",
    "QTable",
    "QTableEntry",
    "StatsTracker",
    "RouterStats",
    "encode_state",
    "hash_context",
    # Backends
    "ScoringBackend",
    "PythonBackend",
    "load_backend",
    # Persistence
    "PersistedTable",
    "PersistedEntry",
    "DecodeResult",
    "encode_table",
    "decode_table",
    "save_table",
    "load_table",
    # Errors
    "RouterError",
    "ConfigurationError",
    "InvalidConfigError",
    "BackendLoadError",
    "PersistenceError",
    # Logging
    "configure_logging",
    "get_logger",
]
