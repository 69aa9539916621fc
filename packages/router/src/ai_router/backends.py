"""
Pluggable scoring backends.

A backend performs the two numeric kernels of the router: greedy action
selection and the in-place TD update of one Q-value. ``PythonBackend`` is
always available. An accelerated implementation can be supplied from any
importable module as a ``"module:attribute"`` path; it must produce the
same results, only faster.
"""

import importlib
from abc import ABC, abstractmethod
from collections.abc import Sequence

from .exceptions import BackendLoadError
from .logging import get_logger

logger = get_logger(__name__)


class ScoringBackend(ABC):
    """Numeric kernels used by the Q-learning router."""

    name: str = "abstract"
    is_native: bool = False

    @abstractmethod
    def best_action(self, q_values: Sequence[float]) -> int:
        """Index of the maximum value, lowest index on ties."""

    @abstractmethod
    def apply_td(
        self,
        q_values: list[float],
        index: int,
        target: float,
        learning_rate: float,
    ) -> float:
        """
        Move ``q_values[index]`` towards ``target`` in place.

        Returns:
            The TD error (target minus the value before the update)
        """


class PythonBackend(ScoringBackend):
    """Pure-Python backend, the default."""

    name = "python"
    is_native = False

    def best_action(self, q_values: Sequence[float]) -> int:
        best_index = 0
        best_value = q_values[0]
        for index in range(1, len(q_values)):
            if q_values[index] > best_value:
                best_index, best_value = index, q_values[index]
        return best_index

    def apply_td(
        self,
        q_values: list[float],
        index: int,
        target: float,
        learning_rate: float,
    ) -> float:
        td_error = target - q_values[index]
        q_values[index] += learning_rate * td_error
        return td_error


def load_backend(path: str) -> ScoringBackend:
    """
    Load a backend from a ``"module:attribute"`` path.

    The attribute may be a ScoringBackend instance, a ScoringBackend
    subclass, or a zero-argument factory returning an instance.

    Raises:
        BackendLoadError: If the path is malformed, the import fails or
            the target is not a ScoringBackend
    """
    module_path, sep, attr_name = path.partition(":")
    if not sep or not module_path or not attr_name:
        raise BackendLoadError(
            f"Backend path must look like 'module:attribute', got {path!r}",
            context={"path": path},
        )

    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise BackendLoadError(
            f"Cannot import backend module: {module_path}",
            context={"path": path},
            cause=e,
        ) from e

    target = getattr(module, attr_name, None)
    if target is None:
        raise BackendLoadError(
            f"Backend not found: {attr_name} in {module_path}",
            context={"path": path},
        )

    if isinstance(target, ScoringBackend):
        backend = target
    elif callable(target):
        try:
            backend = target()
        except Exception as e:
            raise BackendLoadError(
                f"Backend factory failed: {path}",
                context={"path": path},
                cause=e,
            ) from e
    else:
        backend = target

    if not isinstance(backend, ScoringBackend):
        raise BackendLoadError(
            f"{path} did not produce a ScoringBackend",
            context={"path": path, "type": type(backend).__name__},
        )

    logger.info("Loaded scoring backend", backend=backend.name, native=backend.is_native)
    return backend
