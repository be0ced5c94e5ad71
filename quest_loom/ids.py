"""Typed entity references.

Every cross-entity reference is a string of the form ``<kind>:<hex>``, e.g.
``"quest:3f2a..."``. The kind can always be recovered from the reference
itself, so the progression engine never needs a storage round trip just to
know what it is looking at.
"""

from __future__ import annotations

import uuid
from typing import Literal, get_args

EntityType = Literal[
    "quest",
    "insight",
    "item",
    "person",
    "place",
    "map",
    "path",
    "thread",
]

ENTITY_TYPES: tuple[str, ...] = get_args(EntityType)


def new_entity_id(kind: EntityType) -> str:
    """Mint a fresh typed reference for ``kind``."""
    if kind not in ENTITY_TYPES:
        raise ValueError(f"Unknown entity kind {kind!r}")
    return f"{kind}:{uuid.uuid4().hex}"


def parse_entity_id(entity_id: str) -> tuple[str, str] | None:
    """Split a typed reference into ``(kind, raw_id)``.

    Returns None for empty, unprefixed or unknown-kind references.
    """
    if not entity_id or not isinstance(entity_id, str):
        return None
    kind, sep, raw = entity_id.partition(":")
    if not sep or not raw or kind not in ENTITY_TYPES:
        return None
    return kind, raw


def get_entity_type_from_id(entity_id: str) -> str | None:
    parsed = parse_entity_id(entity_id)
    return parsed[0] if parsed else None
