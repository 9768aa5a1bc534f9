"""Column helpers shared by the RNDC models."""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import JSON, Enum
from sqlalchemy.dialects.postgresql import JSONB

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JsonType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def state_enum(enum_cls: type[enum.Enum], name: str) -> Enum:
    """Store a lifecycle enum by its lowercase value, as the RNDC screens expect."""
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        length=30,
        values_callable=lambda members: [m.value for m in members],
    )
