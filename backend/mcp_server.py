"""FastMCP server exposing the progression engine as MCP tools.

Tools:
  - next_steps(playthrough_id)                  : actionable entities + route edges
  - reachable_places(playthrough_id, start?)    : places reachable from a start
  - check_availability(playthrough_id, entity_id) : requirement check with unmet targets

Tools read whatever store backend.storage was initialised with.

Usage:
    uv run python -m backend.mcp_server
"""

from mcp.server.fastmcp import FastMCP

from backend import storage
from quest_loom.progression import (
    check_entity_availability,
    compute_reachable_places,
    get_actionable_entities,
    get_actionable_route_edge_ids,
)

mcp = FastMCP("quest-loom-oracle")


def _playthrough(playthrough_id: str):
    playthrough = storage.get_storage().get_playthrough(playthrough_id)
    if playthrough is None:
        raise ValueError(f"Unknown playthrough {playthrough_id!r}")
    return playthrough


@mcp.tool()
async def next_steps(playthrough_id: str) -> dict:
    """List what the player can do next from their current position."""
    pt = _playthrough(playthrough_id)
    store = storage.get_storage()
    reachable = await compute_reachable_places(store, pt.game_id, pt.id, pt.current_position)
    actionable = await get_actionable_entities(store, pt.game_id, pt.id, reachable)
    edges = await get_actionable_route_edge_ids(
        store, pt.game_id, pt.id, pt.current_position, {a.entity_id for a in actionable}
    )
    return {
        "actionable": [a.model_dump() for a in actionable],
        "route_edge_ids": sorted(edges),
    }


@mcp.tool()
async def reachable_places(playthrough_id: str, start: str = "") -> dict:
    """Return the places reachable from `start` (default: the current position)."""
    pt = _playthrough(playthrough_id)
    reachable = await compute_reachable_places(
        storage.get_storage(), pt.game_id, pt.id, start or pt.current_position
    )
    return {"reachable_place_ids": sorted(reachable)}


@mcp.tool()
async def check_availability(playthrough_id: str, entity_id: str) -> dict:
    """Check whether an entity's requirements are met in a playthrough."""
    pt = _playthrough(playthrough_id)
    result = await check_entity_availability(storage.get_storage(), pt.game_id, pt.id, entity_id)
    return result.model_dump()


if __name__ == "__main__":
    import os
    from pathlib import Path

    storage.init_storage(Path(os.getenv("DATA_DIR", "data")))
    mcp.run()
