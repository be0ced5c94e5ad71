"""Shared fixtures: a throwaway store and a small builder for authored worlds."""

import pytest

from quest_loom.ids import new_entity_id
from quest_loom.models import (
    PROGRESS_MODELS,
    Insight,
    Item,
    Map,
    Path,
    Person,
    Place,
    Quest,
    QuestObjective,
    Thread,
)
from quest_loom.storage import Storage


class WorldBuilder:
    """Author entities and threads for one game, plus one playthrough."""

    def __init__(self, store: Storage) -> None:
        self.store = store
        self.game = store.create_game("Test World")
        self.game_id = self.game.id
        self.playthrough = store.create_playthrough(self.game_id, "Run")
        self.playthrough_id = self.playthrough.id

    def _save(self, entity) -> str:
        self.store.save_entity(entity)
        return entity.id

    def place(self, name: str) -> str:
        return self._save(Place(id=new_entity_id("place"), game_id=self.game_id, name=name))

    def path(self, name: str) -> str:
        return self._save(Path(id=new_entity_id("path"), game_id=self.game_id, name=name))

    def item(self, name: str) -> str:
        return self._save(Item(id=new_entity_id("item"), game_id=self.game_id, name=name))

    def person(self, name: str) -> str:
        return self._save(Person(id=new_entity_id("person"), game_id=self.game_id, name=name))

    def insight(self, title: str) -> str:
        return self._save(Insight(id=new_entity_id("insight"), game_id=self.game_id, title=title))

    def map(self, name: str) -> str:
        return self._save(Map(id=new_entity_id("map"), game_id=self.game_id, name=name))

    def quest(self, title: str, objectives: list[dict] | None = None) -> str:
        return self._save(Quest(
            id=new_entity_id("quest"), game_id=self.game_id, title=title,
            objectives=[QuestObjective(**o) for o in objectives or []],
        ))

    def link(self, source: str, target: str, subtype: str, **fields) -> str:
        thread = Thread(
            id=new_entity_id("thread"), game_id=self.game_id,
            source_id=source, target_id=target, subtype=subtype, **fields,
        )
        self.store.save_thread(thread)
        return thread.id

    def connect(self, path_id: str, *place_ids: str) -> list[str]:
        """Join a path to each place with a connects_path thread."""
        return [self.link(path_id, place_id, "connects_path") for place_id in place_ids]

    def status(self, entity_id: str, status: str, **fields) -> None:
        kind = entity_id.split(":", 1)[0]
        self.store.save_progress(PROGRESS_MODELS[kind](
            playthrough_id=self.playthrough_id, entity_id=entity_id, status=status, **fields,
        ))


@pytest.fixture
def store(tmp_path) -> Storage:
    return Storage(tmp_path)


@pytest.fixture
def world(store) -> WorldBuilder:
    return WorldBuilder(store)
