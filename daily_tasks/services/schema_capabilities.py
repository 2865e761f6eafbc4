"""Which optional task columns the connected database actually has.

Columns were added to `tasks` over time. Instead of reacting to
"column does not exist" errors on every write, the table is inspected once
and every read/write is shaped by the resulting descriptor.
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from sqlalchemy import inspect

logger = logging.getLogger(__name__)

BASE_COLUMNS = frozenset({
    "id", "owner_id", "member", "name", "category", "planned_hours",
    "actual_hours", "status", "date", "created_at",
})

# version -> columns introduced by that version
SCHEMA_LEVELS = {
    1: BASE_COLUMNS,
    2: frozenset({"retrospective", "start_time", "end_time"}),
    3: frozenset({"completion_criteria", "sort_order"}),
}
LATEST_VERSION = max(SCHEMA_LEVELS)
OPTIONAL_COLUMNS = frozenset().union(*(cols for v, cols in SCHEMA_LEVELS.items() if v > 1))


@dataclass(frozen=True)
class SchemaCapabilities:
    version: int
    columns: FrozenSet[str]

    @classmethod
    def from_columns(cls, columns) -> "SchemaCapabilities":
        columns = frozenset(columns)
        version = 0
        for level in sorted(SCHEMA_LEVELS):
            if not SCHEMA_LEVELS[level] <= columns:
                break
            version = level
        return cls(version=version, columns=columns)

    @classmethod
    def latest(cls) -> "SchemaCapabilities":
        return cls.from_columns(BASE_COLUMNS | OPTIONAL_COLUMNS)

    def supports(self, column: str) -> bool:
        return column in self.columns

    @property
    def missing(self) -> FrozenSet[str]:
        return OPTIONAL_COLUMNS - self.columns

    def strip(self, payload: Dict) -> Dict:
        """Drop the fields the table cannot store."""
        return {k: v for k, v in payload.items() if k not in OPTIONAL_COLUMNS or k in self.columns}


_capabilities: Optional[SchemaCapabilities] = None


def load_capabilities(bind) -> SchemaCapabilities:
    columns = {col["name"] for col in inspect(bind).get_columns("tasks")}
    caps = SchemaCapabilities.from_columns(columns)
    if caps.missing:
        logger.warning(f"tasks table at schema v{caps.version}, missing columns: {sorted(caps.missing)}")
    else:
        logger.info(f"tasks table at schema v{caps.version}")
    return caps


def get_capabilities(bind) -> SchemaCapabilities:
    global _capabilities
    if _capabilities is None:
        _capabilities = load_capabilities(bind)
    return _capabilities


def reset_capabilities() -> None:
    global _capabilities
    _capabilities = None
