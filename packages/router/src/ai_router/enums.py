"""
Shared enumerations for the task router.

Route names are only rendered as plain strings at the serialization edge;
inside the package they are validated against this enumeration or the
configured route list.
"""

from enum import Enum


class Route(str, Enum):
    """Default worker roles a task can be routed to."""
    CODER = "coder"
    TESTER = "tester"
    REVIEWER = "reviewer"
    ARCHITECT = "architect"
    RESEARCHER = "researcher"
    OPTIMIZER = "optimizer"
    DEBUGGER = "debugger"
    DOCUMENTER = "documenter"


DEFAULT_ROUTE_NAMES: tuple[str, ...] = tuple(route.value for route in Route)


def default_route_names(num_actions: int) -> tuple[str, ...]:
    """
    Build route names for a router with ``num_actions`` actions.

    Uses the default roles in declaration order and pads with
    ``route_<index>`` when more actions than roles are requested.
    """
    names = list(DEFAULT_ROUTE_NAMES[:num_actions])
    for index in range(len(names), num_actions):
        names.append(f"route_{index}")
    return tuple(names)
