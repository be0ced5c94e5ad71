"""Create a demo world for development/testing."""

import shutil
from typing import Any

from backend import storage
from quest_loom.ids import new_entity_id
from quest_loom.models import (
    Insight,
    Item,
    ItemState,
    Path,
    PathProgress,
    Person,
    PersonProgress,
    Place,
    Quest,
    QuestObjective,
    QuestProgress,
    Thread,
)

DEMO_GAME = {
    "name": "The Sunken Crown",
    "description": "A drowned temple, a lighthouse keeper with a favour to ask, "
    "and a crown the sea never gave back.",
}

DEMO_PLACES = ["Harbor Town", "Market Square", "Old Lighthouse", "Sea Caves", "Sunken Temple"]


def create_demo_data() -> dict[str, Any]:
    """Wipe existing games/playthroughs and write the demo world.

    Returns the ids a caller needs to start poking at it.
    """
    store = storage.get_storage()
    for sub in ("games", "playthroughs"):
        root = storage.data_dir() / sub
        if root.exists():
            shutil.rmtree(root)
        root.mkdir(parents=True, exist_ok=True)

    game = store.create_game(DEMO_GAME["name"], DEMO_GAME["description"])
    gid = game.id

    def _save(entity):
        store.save_entity(entity)
        return entity.id

    def _link(source: str, target: str, subtype: str, **fields) -> str:
        thread = Thread(
            id=new_entity_id("thread"), game_id=gid,
            source_id=source, target_id=target, subtype=subtype, **fields,
        )
        store.save_thread(thread)
        return thread.id

    places = {
        name: _save(Place(id=new_entity_id("place"), game_id=gid, name=name))
        for name in DEMO_PLACES
    }
    harbor, market = places["Harbor Town"], places["Market Square"]
    lighthouse, caves, temple = places["Old Lighthouse"], places["Sea Caves"], places["Sunken Temple"]

    rope = _save(Item(id=new_entity_id("item"), game_id=gid, name="Coil of Rope"))
    key = _save(Item(id=new_entity_id("item"), game_id=gid, name="Temple Key"))
    mara = _save(Person(id=new_entity_id("person"), game_id=gid, name="Old Mara"))
    tides = _save(Insight(id=new_entity_id("insight"), game_id=gid, title="Tide Tables"))
    keeper = _save(Quest(
        id=new_entity_id("quest"), game_id=gid, title="The Keeper's Request", giver=mara,
        objectives=[
            QuestObjective(label="Bring Mara a rope", entity_id=rope),
            QuestObjective(label="Light the lamp"),
        ],
    ))
    crown = _save(Quest(id=new_entity_id("quest"), game_id=gid, title="Raise the Crown"))

    cliff = _save(Path(id=new_entity_id("path"), game_id=gid, name="Cliff Stair"))
    passage = _save(Path(id=new_entity_id("path"), game_id=gid, name="Tidal Passage"))
    tunnel = _save(Path(id=new_entity_id("path"), game_id=gid, name="Collapsed Tunnel"))

    _link(harbor, market, "direct_place_link")
    _link(harbor, cliff, "connects_path")
    _link(cliff, lighthouse, "connects_path")
    # Tidal Passage is a junction joining three places.
    _link(passage, lighthouse, "connects_path")
    _link(passage, caves, "connects_path")
    _link(passage, temple, "connects_path")
    _link(market, tunnel, "connects_path")
    _link(tunnel, caves, "connects_path")

    _link(cliff, rope, "requires", allowed_statuses=["acquired"])
    _link(passage, tides, "requires")
    _link(tides, mara, "requires")
    _link(crown, keeper, "requires")
    _link(crown, key, "requires")

    _link(keeper, mara, "giver")

    for entity_id, place_id in [
        (rope, market), (key, caves), (mara, lighthouse),
        (tides, lighthouse), (keeper, lighthouse), (crown, temple),
    ]:
        store.sync_location_threads(gid, entity_id, [place_id])

    playthrough = store.create_playthrough(gid, "First Voyage", current_position=harbor)
    store.save_progress(PersonProgress(playthrough_id=playthrough.id, entity_id=mara, status="alive"))
    store.save_progress(ItemState(playthrough_id=playthrough.id, entity_id=rope, status="not_acquired"))
    store.save_progress(QuestProgress(playthrough_id=playthrough.id, entity_id=keeper, status="active"))
    store.save_progress(PathProgress(playthrough_id=playthrough.id, entity_id=tunnel, status="blocked"))

    return {
        "game_id": gid,
        "playthrough_id": playthrough.id,
        "places": places,
        "items": {"rope": rope, "key": key},
        "people": {"mara": mara},
        "insights": {"tides": tides},
        "quests": {"keeper": keeper, "crown": crown},
        "paths": {"cliff": cliff, "passage": passage, "tunnel": tunnel},
    }
