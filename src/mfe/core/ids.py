from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

ID_HEX_LENGTH = 12


def now_utc() -> datetime:
    return datetime.now(UTC)


def make_id(prefix: str) -> str:
    """Opaque id such as ``match_3f09c1a2b7de``; the prefix names the entity kind."""
    return f"{prefix}_{uuid4().hex[:ID_HEX_LENGTH]}"


def sequential_id(prefix: str, counter: int) -> str:
    return f"{prefix}_{counter:06d}"
