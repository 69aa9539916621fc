"""
Q-table persistence.

The persisted shape is a plain mapping that survives JSON round trips and
must stay stable across versions:

    {"<state key>": {"qValues": [float, ...], "visits": int}, ...}

Where that mapping is stored is the caller's choice; ``save_table`` and
``load_table`` provide a JSON file store for callers that want one.
"""

import json
import os
import tempfile
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat, ValidationError

from .exceptions import PersistenceError
from .logging import get_logger
from .qtable import QTableEntry

logger = get_logger(__name__)

PersistedTable = dict[str, dict[str, Any]]


class PersistedEntry(BaseModel):
    """One persisted Q-table row."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    q_values: list[FiniteFloat] = Field(alias="qValues")
    visits: int = Field(default=0, ge=0)


@dataclass
class DecodeResult:
    """Rows accepted from a persisted table and keys that were rejected."""

    entries: list[tuple[str, list[float], int]] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def encode_table(rows: Iterable[tuple[str, QTableEntry]]) -> PersistedTable:
    """Render Q-table rows as the persisted mapping (values are copies)."""
    return {
        key: {"qValues": list(entry.q_values), "visits": entry.visits}
        for key, entry in rows
    }


def decode_table(data: Mapping[str, Any], num_actions: int) -> DecodeResult:
    """
    Validate a persisted mapping against the router's action count.

    Entries that are not mappings, carry non-finite or wrong-length
    ``qValues`` or negative ``visits`` are skipped and logged; the rest
    are returned in input order.
    """
    result = DecodeResult()
    for key, raw in data.items():
        state_key = str(key)
        try:
            entry = PersistedEntry.model_validate(raw)
        except ValidationError as e:
            logger.warning(
                "Skipping malformed Q-table entry",
                state=state_key,
                errors=e.error_count(),
            )
            result.skipped.append(state_key)
            continue

        if len(entry.q_values) != num_actions:
            logger.warning(
                "Skipping Q-table entry with wrong action count",
                state=state_key,
                expected=num_actions,
                actual=len(entry.q_values),
            )
            result.skipped.append(state_key)
            continue

        result.entries.append((state_key, entry.q_values, entry.visits))
    return result


def save_table(path: str | Path, data: PersistedTable) -> Path:
    """
    Write a persisted table to a JSON file.

    The file is written to a temporary sibling first and then moved into
    place, so readers never see a partial file.

    Raises:
        PersistenceError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except (OSError, TypeError, ValueError) as e:
        raise PersistenceError(
            f"Failed to write Q-table to {path}",
            context={"path": str(path)},
            cause=e,
        ) from e

    logger.debug("Saved Q-table", path=str(path), states=len(data))
    return path


def load_table(path: str | Path) -> PersistedTable:
    """
    Read a persisted table from a JSON file.

    Raises:
        PersistenceError: If the file is missing, unreadable or not a JSON object
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise PersistenceError(
            f"Failed to read Q-table from {path}",
            context={"path": str(path)},
            cause=e,
        ) from e

    if not isinstance(data, dict):
        raise PersistenceError(
            f"Q-table file {path} does not hold a JSON object",
            context={"path": str(path), "type": type(data).__name__},
        )

    logger.debug("Loaded Q-table", path=str(path), states=len(data))
    return data
