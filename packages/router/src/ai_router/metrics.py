"""
Prometheus metrics for the task router.

Provides pre-defined metrics for monitoring:
- Routing decisions and exploration rate
- Q-learning updates and TD error magnitude
- Q-table size, evictions and import health
"""

from prometheus_client import Counter, Gauge, Histogram

# =============================================================================
# Routing Metrics
# =============================================================================

routing_decisions_total = Counter(
    "ai_router_decisions_total",
    "Total routing decisions made",
    ["route", "explored"],
)

routing_epsilon = Gauge(
    "ai_router_epsilon",
    "Current exploration rate",
    ["router"],
)

# =============================================================================
# Learning Metrics
# =============================================================================

router_updates_total = Counter(
    "ai_router_updates_total",
    "Total Q-learning updates applied",
    ["route"],
)

router_unknown_actions_total = Counter(
    "ai_router_unknown_actions_total",
    "Updates rejected because the action is not a configured route",
)

router_rejected_rewards_total = Counter(
    "ai_router_rejected_rewards_total",
    "Updates rejected because the reward is not a finite number",
)

router_td_error = Histogram(
    "ai_router_td_error_magnitude",
    "Absolute temporal-difference error per update",
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 50.0),
)

# =============================================================================
# Q-Table Metrics
# =============================================================================

q_table_states = Gauge(
    "ai_router_q_table_states",
    "Number of states held in the Q-table",
    ["router"],
)

q_table_evictions_total = Counter(
    "ai_router_q_table_evictions_total",
    "States evicted to keep the Q-table within capacity",
)

q_table_import_skipped_total = Counter(
    "ai_router_q_table_import_skipped_total",
    "Malformed entries skipped while importing a Q-table",
)
