"""
Shared base for persisted records.

Records are immutable pydantic models. They are stored as JSON with camelCase
keys (``lockedAt``, ``isLocked``, ``createdAt``), while Python code uses
snake_case attribute names.
"""

from __future__ import annotations

import time
import uuid

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def now_ms() -> int:
    """Current wall-clock time as integer epoch milliseconds."""
    return int(time.time() * 1000)


def new_id() -> str:
    return str(uuid.uuid4())


class Record(BaseModel):
    """Base for every persisted domain record."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_payload(self) -> dict:
        """JSON-compatible dict in storage layout, as returned to the agent."""
        return self.model_dump(mode="json", by_alias=True)
