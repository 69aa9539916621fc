"""
Configuration management for the task router.

``RouterConfig`` is the immutable, validated parameter set a router is
constructed with. ``RouterSettings`` loads the same knobs (plus logging and
backend options) from environment variables using Pydantic Settings.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .enums import default_route_names
from .exceptions import InvalidConfigError


@dataclass(frozen=True)
class RouterConfig:
    """Learning parameters for a Q-learning router."""

    learning_rate: float = 0.1
    gamma: float = 0.99
    exploration_initial: float = 1.0
    exploration_decay: float = 0.005  # Multiplicative decay applied per update
    exploration_floor: float = 0.01
    num_actions: int = 8
    max_states: int = 10000
    route_names: tuple[str, ...] | None = None  # Defaults derived from num_actions
    seed: int | None = None  # Seed for the exploration RNG

    def __post_init__(self) -> None:
        if self.num_actions < 1:
            raise InvalidConfigError(
                "num_actions must be at least 1",
                context={"num_actions": self.num_actions},
            )
        if self.max_states < 1:
            raise InvalidConfigError(
                "max_states must be at least 1",
                context={"max_states": self.max_states},
            )
        if not 0.0 < self.learning_rate <= 1.0:
            raise InvalidConfigError(
                "learning_rate must be in (0, 1]",
                context={"learning_rate": self.learning_rate},
            )
        for name in ("gamma", "exploration_initial", "exploration_floor"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidConfigError(
                    f"{name} must be in [0, 1]",
                    context={name: value},
                )
        if not 0.0 <= self.exploration_decay < 1.0:
            raise InvalidConfigError(
                "exploration_decay must be in [0, 1)",
                context={"exploration_decay": self.exploration_decay},
            )

        if self.route_names is None:
            object.__setattr__(self, "route_names", default_route_names(self.num_actions))
            return

        names = tuple(str(name) for name in self.route_names)
        if len(names) != self.num_actions:
            raise InvalidConfigError(
                "route_names must have exactly num_actions entries",
                context={"num_actions": self.num_actions, "route_names": list(names)},
            )
        if any(not name for name in names) or len(set(names)) != len(names):
            raise InvalidConfigError(
                "route_names must be unique non-empty strings",
                context={"route_names": list(names)},
            )
        object.__setattr__(self, "route_names", names)

    @property
    def effective_floor(self) -> float:
        """Exploration floor, capped so it never exceeds the initial epsilon."""
        return min(self.exploration_floor, self.exploration_initial)

    def with_overrides(self, **overrides: Any) -> "RouterConfig":
        """Return a copy with selected fields replaced (and re-validated)."""
        values = {
            "learning_rate": self.learning_rate,
            "gamma": self.gamma,
            "exploration_initial": self.exploration_initial,
            "exploration_decay": self.exploration_decay,
            "exploration_floor": self.exploration_floor,
            "num_actions": self.num_actions,
            "max_states": self.max_states,
            "route_names": self.route_names,
            "seed": self.seed,
        }
        unknown = set(overrides) - set(values)
        if unknown:
            raise InvalidConfigError(
                "Unknown router config fields",
                context={"fields": sorted(unknown)},
            )
        # Route names derived from the old action count would no longer fit.
        if "num_actions" in overrides and "route_names" not in overrides:
            values["route_names"] = None
        values.update(overrides)
        return RouterConfig(**values)


class RouterSettings(BaseSettings):
    """Router settings loaded from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="AI_ROUTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    learning_rate: float = 0.1
    gamma: float = 0.99
    exploration_initial: float = 1.0
    exploration_decay: float = 0.005
    exploration_floor: float = 0.01
    num_actions: int = 8
    max_states: int = 10000
    route_names: list[str] | None = None
    seed: int | None = None

    # Optional accelerated backend, as "module:attribute"
    native_backend: str = ""

    # Where callers keep the persisted Q-table (empty = not persisted)
    state_file: str = ""

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"
    service_name: str = Field(default="ai-router")

    def to_router_config(self) -> RouterConfig:
        """
        Build a validated RouterConfig from these settings.

        Raises:
            InvalidConfigError: If any value is out of range
        """
        return RouterConfig(
            learning_rate=self.learning_rate,
            gamma=self.gamma,
            exploration_initial=self.exploration_initial,
            exploration_decay=self.exploration_decay,
            exploration_floor=self.exploration_floor,
            num_actions=self.num_actions,
            max_states=self.max_states,
            route_names=tuple(self.route_names) if self.route_names else None,
            seed=self.seed,
        )


@lru_cache
def get_settings() -> RouterSettings:
    """
    Get cached settings instance.

    Returns:
        RouterSettings instance (cached after first call)
    """
    return RouterSettings()


def reload_settings() -> RouterSettings:
    """
    Reload settings (clears cache).

    Returns:
        Fresh RouterSettings instance
    """
    get_settings.cache_clear()
    return get_settings()
