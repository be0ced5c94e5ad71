"""Actionable next steps and the routes leading to them.

An entity is actionable when it is available (requirements met and, if it has
a location, at least one location reachable) and sits in a "next step" state:

  quest    available                 → "Start quest"
           active, open objective    → "Complete objective: <label>" (one per objective)
  insight  unknown                   → "Discover"
  item     not_acquired              → "Acquire item"
  path     restricted, requirements  → "Open path"
           met
"""

from __future__ import annotations

import asyncio
import logging
from itertools import pairwise

import networkx as nx
from pydantic import BaseModel, Field

from quest_loom.display import entity_label, thread_display_label
from quest_loom.ids import EntityType, get_entity_type_from_id
from quest_loom.repositories import Repositories

from .location import check_entity_availability_with_reachability, get_entity_location_place_ids
from .reachability import (
    PlaceGraph,
    build_path_traversability_map,
    compute_reachable_places,
    load_place_graph,
)
from .requirements import check_entity_availability, get_objective_completability

logger = logging.getLogger(__name__)


class ActionableEntity(BaseModel):
    """One thing the player can do next."""

    entity_id: str
    entity_type: EntityType
    label: str
    action_label: str
    objective_index: int | None = None  # quest objectives only


class LoomOverview(BaseModel):
    """Availability styling for the whole relationship graph."""

    reachable_place_ids: list[str] = Field(default_factory=list)
    entity_availability: dict[str, bool] = Field(default_factory=dict)
    path_traversable: dict[str, bool] = Field(default_factory=dict)
    actionable: list[ActionableEntity] = Field(default_factory=list)
    route_edge_ids: list[str] = Field(default_factory=list)
    thread_labels: dict[str, str] = Field(default_factory=dict)  # edge captions


async def _availability(repos, game_id, playthrough_id, entities, reachable) -> list[bool]:
    return await asyncio.gather(
        *(
            check_entity_availability_with_reachability(
                repos, game_id, playthrough_id, e.id, reachable
            )
            for e in entities
        )
    )


async def get_actionable_entities(
    repos: Repositories,
    game_id: str,
    playthrough_id: str,
    reachable_place_ids: set[str],
) -> list[ActionableEntity]:
    """Available entities in a next-step state: quests, insights, items, then paths."""
    quests, insights, items, paths = await asyncio.gather(
        repos.quests.get_by_game_id(game_id),
        repos.insights.get_by_game_id(game_id),
        repos.items.get_by_game_id(game_id),
        repos.paths.get_by_game_id(game_id),
    )
    quest_progress, insight_progress, item_state, path_progress = await asyncio.gather(
        repos.quests.get_all_progress_for_playthrough(playthrough_id),
        repos.insights.get_all_progress_for_playthrough(playthrough_id),
        repos.items.get_all_progress_for_playthrough(playthrough_id),
        repos.paths.get_all_progress_for_playthrough(playthrough_id),
    )
    quest_progress_by_id = {p.entity_id: p for p in quest_progress}
    insight_status = {p.entity_id: p.status for p in insight_progress}
    item_status = {s.entity_id: s.status for s in item_state}
    path_status = {p.entity_id: p.status for p in path_progress}

    out: list[ActionableEntity] = []

    quest_available = await _availability(repos, game_id, playthrough_id, quests, reachable_place_ids)
    for quest, available in zip(quests, quest_available):
        if not available:
            continue
        progress = quest_progress_by_id.get(quest.id)
        status = progress.status if progress is not None else "available"
        if status == "available":
            out.append(ActionableEntity(
                entity_id=quest.id, entity_type="quest",
                label=entity_label(quest), action_label="Start quest",
            ))
            continue
        if status != "active" or not quest.objectives:
            continue
        completed = set(progress.completed_objective_indexes) if progress is not None else set()
        for i, objective in enumerate(quest.objectives):
            if i in completed:
                continue
            if not await get_objective_completability(repos, playthrough_id, quest, i):
                continue
            objective_label = objective.label or f"Objective {i + 1}"
            out.append(ActionableEntity(
                entity_id=quest.id, entity_type="quest",
                label=entity_label(quest),
                action_label=f"Complete objective: {objective_label}",
                objective_index=i,
            ))

    insight_available = await _availability(repos, game_id, playthrough_id, insights, reachable_place_ids)
    for insight, available in zip(insights, insight_available):
        if available and insight_status.get(insight.id, "unknown") == "unknown":
            out.append(ActionableEntity(
                entity_id=insight.id, entity_type="insight",
                label=entity_label(insight), action_label="Discover",
            ))

    item_available = await _availability(repos, game_id, playthrough_id, items, reachable_place_ids)
    for item, available in zip(items, item_available):
        if available and item_status.get(item.id, "not_acquired") == "not_acquired":
            out.append(ActionableEntity(
                entity_id=item.id, entity_type="item",
                label=entity_label(item), action_label="Acquire item",
            ))

    path_results = await asyncio.gather(
        *(check_entity_availability(repos, game_id, playthrough_id, p.id) for p in paths)
    )
    for path, result in zip(paths, path_results):
        if result.available and path_status.get(path.id, "restricted") == "restricted":
            out.append(ActionableEntity(
                entity_id=path.id, entity_type="path",
                label=entity_label(path), action_label="Open path",
            ))

    logger.debug("%d actionable entities for playthrough %s", len(out), playthrough_id)
    return out


def shortest_path_thread_ids(start_place_id: str, graph: PlaceGraph) -> dict[str, set[str]]:
    """Map each place reachable from the start to the threads on its first-found shortest route."""
    if start_place_id not in graph:
        return {}
    routes: dict[str, set[str]] = {}
    for place_id, route in nx.single_source_shortest_path(graph, start_place_id).items():
        thread_ids: set[str] = set()
        for a, b in pairwise(route):
            thread_ids |= graph.edges[a, b]["thread_ids"]
        routes[place_id] = thread_ids
    return routes


async def get_actionable_route_edge_ids(
    repos: Repositories,
    game_id: str,
    playthrough_id: str,
    current_position: str | None,
    actionable_ids: set[str],
) -> set[str]:
    """Thread ids lying on shortest routes from the current position to actionable entities."""
    if not current_position or not actionable_ids:
        return set()

    place_ids, graph = await load_place_graph(repos, game_id, playthrough_id)
    if current_position not in place_ids:
        return set()
    routes = shortest_path_thread_ids(current_position, graph)

    target_place_ids: set[str] = set()
    for entity_id in actionable_ids:
        if get_entity_type_from_id(entity_id) == "place":
            if entity_id in place_ids:
                target_place_ids.add(entity_id)
            continue
        target_place_ids.update(await get_entity_location_place_ids(repos, game_id, entity_id))

    edge_ids: set[str] = set()
    for place_id in target_place_ids:
        edge_ids |= routes.get(place_id, set())
    return edge_ids


async def get_loom_overview(
    repos: Repositories,
    game_id: str,
    playthrough_id: str,
    current_position: str | None,
) -> LoomOverview:
    """Everything the relationship graph needs to style nodes and edges."""
    reachable = await compute_reachable_places(repos, game_id, playthrough_id, current_position)

    groups = await asyncio.gather(
        repos.quests.get_by_game_id(game_id),
        repos.insights.get_by_game_id(game_id),
        repos.items.get_by_game_id(game_id),
        repos.people.get_by_game_id(game_id),
        repos.places.get_by_game_id(game_id),
        repos.maps.get_by_game_id(game_id),
        repos.paths.get_by_game_id(game_id),
    )
    entities = [e for group in groups for e in group]
    paths = groups[-1]
    threads = await repos.threads.get_by_game_id(game_id, playthrough_id)

    availability = await _availability(repos, game_id, playthrough_id, entities, reachable)
    traversable = await build_path_traversability_map(repos, game_id, playthrough_id, paths)
    actionable = await get_actionable_entities(repos, game_id, playthrough_id, reachable)
    route_edge_ids = await get_actionable_route_edge_ids(
        repos, game_id, playthrough_id, current_position,
        {a.entity_id for a in actionable},
    )

    return LoomOverview(
        reachable_place_ids=sorted(reachable),
        entity_availability={e.id: ok for e, ok in zip(entities, availability)},
        path_traversable=traversable,
        actionable=actionable,
        route_edge_ids=sorted(route_edge_ids),
        thread_labels={t.id: thread_display_label(t) for t in threads},
    )
