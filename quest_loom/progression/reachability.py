"""Place reachability over direct links and traversable paths.

The place graph has two kinds of edge:

  direct_place_link  Place ↔ Place, always traversable.
  connects_path      Place ↔ Path ↔ Place. A path is traversable when its
                     playthrough status is ``opened``, or ``restricted`` with
                     all of its own requirements met. ``blocked`` never is.

A traversable path joins *every pair* of its endpoint places, so a path with
three or more endpoints acts as a junction rather than a chain. Each of those
edges carries the ids of all the path's connects_path threads; route
highlighting lights up the whole junction when any part of it is used.
Parallel links between the same two places merge into one edge carrying all
of their thread ids.

Path traversability depends only on the path's status and its requirements,
never on reachability itself.
"""

from __future__ import annotations

import asyncio
import logging
from itertools import combinations

import networkx as nx

from quest_loom.ids import get_entity_type_from_id
from quest_loom.models import Entity, Thread
from quest_loom.repositories import Repositories

from .requirements import check_entity_availability

logger = logging.getLogger(__name__)

# Undirected graph over place refs; each edge carries a "thread_ids" set.
PlaceGraph = nx.Graph


async def build_path_traversability_map(
    repos: Repositories, game_id: str, playthrough_id: str, paths: list[Entity]
) -> dict[str, bool]:
    """Map each path id to whether it can be walked in this playthrough."""
    progress = await repos.paths.get_all_progress_for_playthrough(playthrough_id)
    status_by_id = {row.entity_id: row.status for row in progress}

    results = await asyncio.gather(
        *(check_entity_availability(repos, game_id, playthrough_id, p.id) for p in paths)
    )

    traversable: dict[str, bool] = {}
    for path, availability in zip(paths, results):
        status = status_by_id.get(path.id, "restricted")
        if status == "blocked":
            traversable[path.id] = False
        elif status == "opened":
            traversable[path.id] = True
        else:
            traversable[path.id] = availability.available
        logger.debug("path %s status=%s traversable=%s", path.id, status, traversable[path.id])
    return traversable


def _join(graph: PlaceGraph, a: str, b: str, thread_ids: set[str]) -> None:
    """Add an undirected edge, merging thread ids into any edge already there."""
    if graph.has_edge(a, b):
        graph.edges[a, b]["thread_ids"] |= thread_ids
    else:
        graph.add_edge(a, b, thread_ids=set(thread_ids))


def build_place_graph(
    threads: list[Thread], place_ids: set[str], traversable_by_path_id: dict[str, bool]
) -> PlaceGraph:
    graph: PlaceGraph = nx.Graph()
    graph.add_nodes_from(place_ids)
    path_endpoints: dict[str, list[tuple[str, str]]] = {}

    for thread in threads:
        source_kind = get_entity_type_from_id(thread.source_id)
        target_kind = get_entity_type_from_id(thread.target_id)

        if thread.subtype == "direct_place_link":
            if source_kind != "place" or target_kind != "place":
                logger.warning("direct_place_link %s does not join two places; skipped", thread.id)
                continue
            if thread.source_id in place_ids and thread.target_id in place_ids:
                _join(graph, thread.source_id, thread.target_id, {thread.id})

        elif thread.subtype == "connects_path":
            if source_kind == "path":
                path_id, place_id = thread.source_id, thread.target_id
            elif target_kind == "path":
                path_id, place_id = thread.target_id, thread.source_id
            else:
                logger.warning("connects_path %s has no path endpoint; skipped", thread.id)
                continue
            if place_id in place_ids:
                path_endpoints.setdefault(path_id, []).append((place_id, thread.id))

    for path_id, endpoints in path_endpoints.items():
        if not traversable_by_path_id.get(path_id, False):
            continue
        edge_threads = {thread_id for _, thread_id in endpoints}
        places = list(dict.fromkeys(place_id for place_id, _ in endpoints))
        for a, b in combinations(places, 2):
            _join(graph, a, b, edge_threads)

    return graph


def reachable_from(start_place_id: str, graph: PlaceGraph) -> set[str]:
    if start_place_id not in graph:
        return set()
    return set(nx.node_connected_component(graph, start_place_id))


async def load_place_graph(
    repos: Repositories, game_id: str, playthrough_id: str
) -> tuple[set[str], PlaceGraph]:
    """Fetch a fresh snapshot and build the traversable place graph from it."""
    places, paths, threads = await asyncio.gather(
        repos.places.get_by_game_id(game_id),
        repos.paths.get_by_game_id(game_id),
        repos.threads.get_by_game_id(game_id, playthrough_id),
    )
    place_ids = {p.id for p in places}
    traversable = await build_path_traversability_map(repos, game_id, playthrough_id, paths)
    return place_ids, build_place_graph(threads, place_ids, traversable)


async def compute_reachable_places(
    repos: Repositories, game_id: str, playthrough_id: str, start_place_id: str | None
) -> set[str]:
    """Places reachable from ``start_place_id``, the start place included.

    Missing identifiers or an unknown start place give an empty set.
    """
    if not game_id or not playthrough_id or not start_place_id:
        return set()

    place_ids, graph = await load_place_graph(repos, game_id, playthrough_id)
    if start_place_id not in place_ids:
        logger.debug("start place %s not in game %s", start_place_id, game_id)
        return set()

    reachable = reachable_from(start_place_id, graph)
    logger.debug("%d of %d places reachable from %s", len(reachable), len(place_ids), start_place_id)
    return reachable
