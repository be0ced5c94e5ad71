"""Display names for entities and threads."""

from __future__ import annotations

from collections.abc import Callable

from quest_loom.ids import get_entity_type_from_id
from quest_loom.models import Entity, Thread
from quest_loom.repositories import EntitySource, Repositories

LABEL_FIELDS: dict[str, str] = {
    "quest": "title",
    "insight": "title",
    "item": "name",
    "person": "name",
    "place": "name",
    "map": "name",
    "path": "name",
}

ENTITY_SOURCES: dict[str, Callable[[Repositories], EntitySource]] = {
    "quest": lambda repos: repos.quests,
    "insight": lambda repos: repos.insights,
    "item": lambda repos: repos.items,
    "person": lambda repos: repos.people,
    "place": lambda repos: repos.places,
    "map": lambda repos: repos.maps,
    "path": lambda repos: repos.paths,
}

SUBTYPE_LABELS: dict[str, str] = {
    "giver": "Giver",
    "location": "Location",
    "map": "Map",
    "requires": "Requires",
    "objective_requires": "Objective",
    "direct_place_link": "Connected to",
    "connects_path": "Path",
}


def entity_label(entity: Entity) -> str:
    return getattr(entity, LABEL_FIELDS.get(entity.kind, "name"), "") or entity.id


async def get_entity_display_name(repos: Repositories, game_id: str, entity_id: str) -> str:
    """Look up an entity's title or name; falls back to the reference itself."""
    entity_id = (entity_id or "").strip()
    if not entity_id:
        return ""
    source = ENTITY_SOURCES.get(get_entity_type_from_id(entity_id) or "")
    if source is None:
        return entity_id
    entity = await source(repos).get_by_id(game_id, entity_id)
    return entity_label(entity) if entity is not None else entity_id


def thread_display_label(thread: Thread) -> str:
    if thread.subtype == "custom":
        return thread.label.strip()
    return SUBTYPE_LABELS.get(thread.subtype, "")
