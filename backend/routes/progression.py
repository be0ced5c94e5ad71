"""Contextual progression endpoints: reachability, availability, next steps, loom."""

from fastapi import APIRouter, HTTPException

from backend import storage
from backend.oracle import OracleError, build_oracle_context, render_oracle
from quest_loom.display import get_entity_display_name
from quest_loom.models import Playthrough
from quest_loom.progression import (
    check_entity_availability,
    compute_reachable_places,
    get_actionable_entities,
    get_actionable_route_edge_ids,
    get_loom_overview,
    get_objective_completability,
)

router = APIRouter()


def _playthrough_or_404(playthrough_id: str) -> Playthrough:
    playthrough = storage.get_storage().get_playthrough(playthrough_id)
    if not playthrough:
        raise HTTPException(404, "Playthrough not found")
    return playthrough


@router.get("/playthroughs/{playthrough_id}/reachable")
async def reachable_places(playthrough_id: str, start: str | None = None):
    """Places reachable from `start` (defaults to the current position)."""
    pt = _playthrough_or_404(playthrough_id)
    reachable = await compute_reachable_places(
        storage.get_storage(), pt.game_id, pt.id, start or pt.current_position
    )
    return {"reachable_place_ids": sorted(reachable)}


@router.get("/playthroughs/{playthrough_id}/availability/{entity_id}")
async def entity_availability(playthrough_id: str, entity_id: str):
    """Whether an entity's requirements are met, with unmet target names."""
    pt = _playthrough_or_404(playthrough_id)
    store = storage.get_storage()
    result = await check_entity_availability(store, pt.game_id, pt.id, entity_id)
    unmet_names = [
        await get_entity_display_name(store, pt.game_id, target_id)
        for target_id in result.unmet_target_ids
    ]
    return {**result.model_dump(), "unmet_target_names": unmet_names}


@router.get("/playthroughs/{playthrough_id}/quests/{quest_id}/objectives/{index}")
async def objective_completability(playthrough_id: str, quest_id: str, index: int):
    """Whether a quest objective can be marked complete now."""
    pt = _playthrough_or_404(playthrough_id)
    store = storage.get_storage()
    quest = await store.quests.get_by_id(pt.game_id, quest_id)
    if not quest:
        raise HTTPException(404, "Quest not found")
    completable = await get_objective_completability(store, pt.id, quest, index)
    return {"completable": completable}


@router.get("/playthroughs/{playthrough_id}/next-steps")
async def next_steps(playthrough_id: str):
    """Actionable entities, their route edges, and the rendered oracle text."""
    pt = _playthrough_or_404(playthrough_id)
    store = storage.get_storage()

    reachable = await compute_reachable_places(store, pt.game_id, pt.id, pt.current_position)
    actionable = await get_actionable_entities(store, pt.game_id, pt.id, reachable)
    route_edge_ids = await get_actionable_route_edge_ids(
        store, pt.game_id, pt.id, pt.current_position, {a.entity_id for a in actionable}
    )

    config = storage.get_config()
    position_name = (
        await get_entity_display_name(store, pt.game_id, pt.current_position)
        if pt.current_position else ""
    )
    reachable_names = sorted(
        [await get_entity_display_name(store, pt.game_id, p) for p in reachable]
    )
    context = build_oracle_context(
        actionable,
        position_name=position_name,
        reachable_names=reachable_names,
        empty_text=config["oracle_empty_text"],
    )
    try:
        oracle = render_oracle(config["oracle_template"], context)
    except OracleError as e:
        raise HTTPException(400, str(e))

    return {
        "position": pt.current_position,
        "reachable_place_ids": sorted(reachable),
        "actionable": [a.model_dump() for a in actionable],
        "route_edge_ids": sorted(route_edge_ids),
        "oracle": oracle,
    }


@router.get("/playthroughs/{playthrough_id}/loom")
async def loom(playthrough_id: str):
    """Node availability, path traversability and highlighted route edges for the graph."""
    pt = _playthrough_or_404(playthrough_id)
    return await get_loom_overview(storage.get_storage(), pt.game_id, pt.id, pt.current_position)
