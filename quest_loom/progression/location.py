"""Where entities are: a place is at itself, anything else via location threads."""

from __future__ import annotations

from quest_loom.ids import get_entity_type_from_id
from quest_loom.repositories import Repositories

from .requirements import check_entity_availability


async def get_entity_location_place_ids(
    repos: Repositories, game_id: str, entity_id: str
) -> list[str]:
    """Place refs at which ``entity_id`` is located, in first-seen order.

    Location threads count in either direction as long as the other end is a
    place. Only game-authored threads are considered.
    """
    kind = get_entity_type_from_id(entity_id)
    if kind is None:
        return []
    if kind == "place":
        return [entity_id]

    threads = await repos.threads.get_by_game_id(game_id, None)
    place_ids: list[str] = []
    for thread in threads:
        if thread.subtype != "location":
            continue
        if thread.source_id == entity_id:
            other = thread.target_id
        elif thread.target_id == entity_id:
            other = thread.source_id
        else:
            continue
        if get_entity_type_from_id(other) == "place" and other not in place_ids:
            place_ids.append(other)
    return place_ids


async def check_entity_availability_with_reachability(
    repos: Repositories,
    game_id: str,
    playthrough_id: str,
    entity_id: str,
    reachable_place_ids: set[str],
) -> bool:
    """Requirements met, and at least one location reachable if it has any."""
    result = await check_entity_availability(repos, game_id, playthrough_id, entity_id)
    if not result.available:
        return False
    locations = await get_entity_location_place_ids(repos, game_id, entity_id)
    if not locations:
        return True
    return any(place_id in reachable_place_ids for place_id in locations)
