"""Tests for path traversability and place reachability."""

import json

import pytest

from quest_loom.models import Thread
from quest_loom.progression import (
    build_path_traversability_map,
    build_place_graph,
    compute_reachable_places,
    reachable_from,
)


async def _reachable(world, start, playthrough_id=None):
    return await compute_reachable_places(
        world.store, world.game_id, playthrough_id or world.playthrough_id, start
    )


async def _traversable(world):
    paths = await world.store.paths.get_by_game_id(world.game_id)
    return await build_path_traversability_map(
        world.store, world.game_id, world.playthrough_id, paths
    )


# ── Path traversability ─────────────────────────────────


async def test_restricted_by_default_without_requirements_is_traversable(world):
    bridge = world.path("Bridge")
    assert await _traversable(world) == {bridge: True}


async def test_blocked_ignores_satisfied_requirements(world):
    bridge = world.path("Bridge")
    world.status(bridge, "blocked")
    assert (await _traversable(world))[bridge] is False


async def test_opened_ignores_unmet_requirements(world):
    bridge = world.path("Bridge")
    toll = world.item("Toll Coin")
    world.link(bridge, toll, "requires")
    world.status(bridge, "opened")
    assert (await _traversable(world))[bridge] is True


async def test_restricted_follows_own_requirements(world):
    bridge = world.path("Bridge")
    toll = world.item("Toll Coin")
    world.link(bridge, toll, "requires")

    world.status(toll, "not_acquired")
    assert (await _traversable(world))[bridge] is False
    world.status(toll, "acquired")
    assert (await _traversable(world))[bridge] is True


# ── Reachability ────────────────────────────────────────


async def test_start_place_alone(world):
    x = world.place("X")
    assert await _reachable(world, x) == {x}


async def test_direct_link_scenario(world):
    x, y = world.place("X"), world.place("Y")
    world.link(x, y, "direct_place_link")
    assert await _reachable(world, x) == {x, y}
    assert await _reachable(world, y) == {x, y}


async def test_blocked_path_scenario(world):
    x, y = world.place("X"), world.place("Y")
    p = world.path("P")
    world.link(x, p, "connects_path")
    world.link(p, y, "connects_path")
    world.status(p, "blocked")
    assert await _reachable(world, x) == {x}


async def test_restricted_path_opens_when_item_acquired(world):
    x, y = world.place("X"), world.place("Y")
    p = world.path("P")
    world.link(x, p, "connects_path")
    world.link(p, y, "connects_path")
    world.status(p, "restricted")
    key = world.item("I")
    world.link(p, key, "requires", allowed_statuses=["acquired"])

    world.status(key, "not_acquired")
    assert await _reachable(world, x) == {x}

    world.status(key, "acquired")
    assert await _reachable(world, x) == {x, y}


async def test_multi_hop_over_links_and_paths(world):
    a, b, c, d = (world.place(n) for n in "ABCD")
    world.link(a, b, "direct_place_link")
    road = world.path("Road")
    world.connect(road, b, c)
    world.link(c, d, "direct_place_link")
    assert await _reachable(world, a) == {a, b, c, d}


async def test_junction_path_connects_every_endpoint(world):
    hub, north, south = world.place("Hub"), world.place("North"), world.place("South")
    crossing = world.path("Crossing")
    world.connect(crossing, north, hub, south)
    assert await _reachable(world, north) == {hub, north, south}
    assert await _reachable(world, south) == {hub, north, south}


async def test_unreachable_island(world):
    x, y, island = world.place("X"), world.place("Y"), world.place("Island")
    world.link(x, y, "direct_place_link")
    assert island not in await _reachable(world, x)


async def test_adding_link_only_grows_reachable_set(world):
    a, b, c = world.place("A"), world.place("B"), world.place("C")
    world.link(a, b, "direct_place_link")
    before = await _reachable(world, a)

    world.link(b, c, "direct_place_link")
    after = await _reachable(world, a)
    assert before <= after
    assert after == {a, b, c}


async def test_private_thread_only_counts_for_its_playthrough(world):
    x, y = world.place("X"), world.place("Y")
    world.link(x, y, "direct_place_link", playthrough_id=world.playthrough_id)
    other = world.store.create_playthrough(world.game_id, "Other")

    assert await _reachable(world, x) == {x, y}
    assert await _reachable(world, x, playthrough_id=other.id) == {x}


async def test_malformed_links_are_skipped(world):
    x = world.place("X")
    rope = world.item("Rope")
    world.link(x, rope, "direct_place_link")
    world.link(x, rope, "connects_path")
    assert await _reachable(world, x) == {x}


async def test_path_endpoint_from_other_game_ignored(world):
    x = world.place("X")
    p = world.path("P")
    world.connect(p, x, "place:elsewhere")
    assert await _reachable(world, x) == {x}


@pytest.mark.parametrize("start", [None, "", "place:missing", "item:abc"])
async def test_invalid_start_gives_empty_set(world, start):
    world.place("X")
    assert await _reachable(world, start) == set()


async def test_missing_game_or_playthrough_gives_empty_set(world):
    x = world.place("X")
    assert await compute_reachable_places(world.store, "", world.playthrough_id, x) == set()
    assert await compute_reachable_places(world.store, world.game_id, "", x) == set()


async def test_game_without_places_gives_empty_set(world):
    assert await _reachable(world, "place:nowhere") == set()


async def test_thread_with_unresolvable_endpoint_is_skipped(world):
    a, b = world.place("A"), world.place("B")
    world.link(a, b, "direct_place_link")
    threads_file = world.store.game_dir(world.game_id) / "threads.json"
    rows = json.loads(threads_file.read_text())
    rows.append({
        "id": "thread:legacy", "game_id": world.game_id,
        "source_id": a, "target_id": "legacy-ref", "subtype": "custom",
    })
    threads_file.write_text(json.dumps(rows))

    assert await _reachable(world, a) == {a, b}


# ── Place graph ──────────────────────────────────────────


def _thread(source, target, subtype, thread_id):
    return Thread(id=thread_id, game_id="g", source_id=source, target_id=target, subtype=subtype)


def test_junction_edges_carry_every_path_thread():
    threads = [
        _thread("path:p", "place:a", "connects_path", "thread:1"),
        _thread("place:b", "path:p", "connects_path", "thread:2"),
        _thread("path:p", "place:c", "connects_path", "thread:3"),
    ]
    graph = build_place_graph(threads, {"place:a", "place:b", "place:c"}, {"path:p": True})
    assert graph.number_of_edges() == 3
    for _, _, thread_ids in graph.edges(data="thread_ids"):
        assert thread_ids == {"thread:1", "thread:2", "thread:3"}


def test_untraversable_path_adds_no_edges():
    threads = [
        _thread("path:p", "place:a", "connects_path", "thread:1"),
        _thread("path:p", "place:b", "connects_path", "thread:2"),
    ]
    graph = build_place_graph(threads, {"place:a", "place:b"}, {"path:p": False})
    assert graph.number_of_edges() == 0
    assert reachable_from("place:a", graph) == {"place:a"}


def test_parallel_links_merge_thread_ids():
    threads = [
        _thread("place:a", "place:b", "direct_place_link", "thread:1"),
        _thread("place:b", "place:a", "direct_place_link", "thread:2"),
    ]
    graph = build_place_graph(threads, {"place:a", "place:b"}, {})
    assert graph.edges["place:a", "place:b"]["thread_ids"] == {"thread:1", "thread:2"}
    assert reachable_from("place:b", graph) == {"place:a", "place:b"}
    assert reachable_from("place:z", graph) == set()
