"""JSON file storage.

All state is stored in flat JSON files under a configurable base directory.
There is no database or ORM. Authoring writes are plain synchronous helper
methods; the read side matches the async protocols in
``quest_loom.repositories`` so a Storage can be handed straight to the
progression engine.

Directory layout:

    {base}/
      games/
        {game_id}.json                ← game metadata
        {game_id}/
          quests.json                 ← list of Quest objects
          insights.json, items.json, people.json,
          places.json, maps.json, paths.json
          threads.json                ← game-scoped and playthrough-private threads
      playthroughs/
        {playthrough_id}.json         ← playthrough metadata + current position
        {playthrough_id}/
          quest_progress.json         ← one progress record per entity
          insight_progress.json, item_progress.json,
          person_progress.json, path_progress.json
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from quest_loom.ids import get_entity_type_from_id, new_entity_id
from quest_loom.models import (
    ENTITY_MODELS,
    PROGRESS_MODELS,
    Entity,
    Game,
    Playthrough,
    Progress,
    Thread,
)

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when a stored record cannot be read or fails validation."""


class Storage:
    def __init__(self, base_path: Path) -> None:
        self._base = base_path
        self._games_root = base_path / "games"
        self._playthroughs_root = base_path / "playthroughs"
        self._games_root.mkdir(parents=True, exist_ok=True)
        self._playthroughs_root.mkdir(parents=True, exist_ok=True)

        self.quests = ProgressTable(self, "quest", "quests")
        self.insights = ProgressTable(self, "insight", "insights")
        self.items = ProgressTable(self, "item", "items")
        self.people = ProgressTable(self, "person", "people")
        self.paths = ProgressTable(self, "path", "paths")
        self.places = EntityTable(self, "place", "places")
        self.maps = EntityTable(self, "map", "maps")
        self.threads = ThreadTable(self)

        self._tables: dict[str, EntityTable] = {
            t.kind: t
            for t in (
                self.quests, self.insights, self.items, self.people,
                self.paths, self.places, self.maps,
            )
        }

    # ------------------------------------------------------------------
    # Internal path helpers
    # ------------------------------------------------------------------

    def game_dir(self, game_id: str) -> Path:
        return self._games_root / game_id

    def playthrough_dir(self, playthrough_id: str) -> Path:
        return self._playthroughs_root / playthrough_id

    def read_json(self, path: Path) -> Any:
        try:
            return json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read {path}: {e}") from e

    def write_json(self, path: Path, data: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2))

    def load_models(self, path: Path, model: type[BaseModel]) -> list[Any]:
        if not path.exists():
            return []
        try:
            return [model.model_validate(row) for row in self.read_json(path)]
        except ValidationError as e:
            raise StorageError(f"Corrupt record in {path}: {e}") from e

    def dump_models(self, path: Path, rows: list[BaseModel]) -> None:
        self.write_json(path, [r.model_dump() for r in rows])

    def table_for(self, entity_id: str) -> EntityTable:
        kind = get_entity_type_from_id(entity_id)
        table = self._tables.get(kind or "")
        if table is None:
            raise ValueError(f"No entity table for reference {entity_id!r}")
        return table

    # ------------------------------------------------------------------
    # Games
    # ------------------------------------------------------------------

    def create_game(self, name: str, description: str = "") -> Game:
        game = Game(name=name, description=description)
        (self._games_root / f"{game.id}.json").write_text(game.model_dump_json(indent=2))
        self.game_dir(game.id).mkdir(exist_ok=True)
        return game

    def get_game(self, game_id: str) -> Game | None:
        path = self._games_root / f"{game_id}.json"
        if not path.is_file():
            return None
        try:
            return Game.model_validate_json(path.read_text())
        except ValidationError as e:
            raise StorageError(f"Corrupt game record {path}: {e}") from e

    def list_games(self) -> list[Game]:
        return [
            g for g in (self.get_game(p.stem) for p in sorted(self._games_root.glob("*.json")))
            if g is not None
        ]

    # ------------------------------------------------------------------
    # Playthroughs
    # ------------------------------------------------------------------

    def create_playthrough(
        self, game_id: str, name: str, current_position: str | None = None
    ) -> Playthrough:
        playthrough = Playthrough(game_id=game_id, name=name, current_position=current_position)
        self._save_playthrough(playthrough)
        self.playthrough_dir(playthrough.id).mkdir(exist_ok=True)
        return playthrough

    def _save_playthrough(self, playthrough: Playthrough) -> None:
        path = self._playthroughs_root / f"{playthrough.id}.json"
        path.write_text(playthrough.model_dump_json(indent=2))

    def get_playthrough(self, playthrough_id: str) -> Playthrough | None:
        path = self._playthroughs_root / f"{playthrough_id}.json"
        if not path.is_file():
            return None
        try:
            return Playthrough.model_validate_json(path.read_text())
        except ValidationError as e:
            raise StorageError(f"Corrupt playthrough record {path}: {e}") from e

    def list_playthroughs(self, game_id: str) -> list[Playthrough]:
        results = []
        for path in sorted(self._playthroughs_root.glob("*.json")):
            playthrough = self.get_playthrough(path.stem)
            if playthrough is not None and playthrough.game_id == game_id:
                results.append(playthrough)
        return results

    def set_position(self, playthrough_id: str, place_id: str | None) -> Playthrough | None:
        """Move the player. Returns the updated playthrough, or None if unknown."""
        playthrough = self.get_playthrough(playthrough_id)
        if playthrough is None:
            return None
        updated = Playthrough.model_validate(
            {**playthrough.model_dump(), "current_position": place_id}
        )
        self._save_playthrough(updated)
        return updated

    def delete_playthrough(self, playthrough_id: str) -> bool:
        """Delete a playthrough with its progress records and private threads."""
        playthrough = self.get_playthrough(playthrough_id)
        if playthrough is None:
            return False
        (self._playthroughs_root / f"{playthrough_id}.json").unlink()
        pt_dir = self.playthrough_dir(playthrough_id)
        if pt_dir.is_dir():
            for child in pt_dir.iterdir():
                child.unlink()
            pt_dir.rmdir()
        self.threads.delete_where(
            playthrough.game_id, lambda t: t.playthrough_id == playthrough_id
        )
        return True

    # ------------------------------------------------------------------
    # Entities, threads, progress
    # ------------------------------------------------------------------

    def save_entity(self, entity: Entity) -> None:
        self.table_for(entity.id).save(entity)

    def save_thread(self, thread: Thread) -> None:
        self.threads.save(thread)

    def sync_location_threads(
        self, game_id: str, entity_id: str, place_ids: list[str]
    ) -> list[Thread]:
        """Replace the entity's game-scoped location threads with one per place.

        Only threads leaving ``entity_id`` are replaced. Duplicate place ids
        collapse to one thread. Returns the new threads.
        """
        if get_entity_type_from_id(entity_id) is None:
            raise ValueError(f"Unresolvable entity reference {entity_id!r}")
        places = list(dict.fromkeys(place_ids))
        not_places = [p for p in places if get_entity_type_from_id(p) != "place"]
        if not_places:
            raise ValueError(f"Locations must be place references, got {not_places}")

        removed = self.threads.delete_where(
            game_id,
            lambda t: t.source_id == entity_id
            and t.subtype == "location"
            and t.playthrough_id is None,
        )
        created = [
            Thread(
                id=new_entity_id("thread"), game_id=game_id,
                source_id=entity_id, target_id=place_id, subtype="location",
            )
            for place_id in places
        ]
        for thread in created:
            self.threads.save(thread)
        logger.debug(
            "Synced %s locations: %d removed, %d created", entity_id, removed, len(created)
        )
        return created

    def save_progress(self, progress: Progress) -> None:
        table = self.table_for(progress.entity_id)
        if not isinstance(table, ProgressTable):
            raise ValueError(f"{table.kind} entities carry no playthrough status")
        table.save_progress(progress)

    def delete_entity(self, game_id: str, entity_id: str) -> bool:
        """Delete an entity, every thread touching it, and its progress records."""
        table = self.table_for(entity_id)
        if not table.delete(game_id, entity_id):
            return False
        removed = self.threads.delete_where(
            game_id, lambda t: entity_id in (t.source_id, t.target_id)
        )
        logger.debug("Deleted %s and %d attached threads", entity_id, removed)
        if isinstance(table, ProgressTable):
            for playthrough in self.list_playthroughs(game_id):
                table.delete_progress(playthrough.id, entity_id)
        return True


class EntityTable:
    """Game-scoped entity list for one kind, stored as a single JSON array."""

    def __init__(self, storage: Storage, kind: str, filename: str) -> None:
        self._storage = storage
        self.kind = kind
        self._filename = filename
        self._model = ENTITY_MODELS[kind]

    def _path(self, game_id: str) -> Path:
        return self._storage.game_dir(game_id) / f"{self._filename}.json"

    def load(self, game_id: str) -> list[Entity]:
        return self._storage.load_models(self._path(game_id), self._model)

    async def get_by_game_id(self, game_id: str) -> list[Entity]:
        return self.load(game_id)

    async def get_by_id(self, game_id: str, entity_id: str) -> Entity | None:
        for entity in self.load(game_id):
            if entity.id == entity_id:
                return entity
        return None

    def save(self, entity: Entity) -> None:
        """Upsert an entity by id."""
        rows = self.load(entity.game_id)
        for i, row in enumerate(rows):
            if row.id == entity.id:
                rows[i] = entity
                break
        else:
            rows.append(entity)
        self._storage.dump_models(self._path(entity.game_id), rows)

    def delete(self, game_id: str, entity_id: str) -> bool:
        rows = self.load(game_id)
        kept = [r for r in rows if r.id != entity_id]
        if len(kept) == len(rows):
            return False
        self._storage.dump_models(self._path(game_id), kept)
        return True


class ProgressTable(EntityTable):
    """Entity table for kinds that also carry per-playthrough status."""

    def __init__(self, storage: Storage, kind: str, filename: str) -> None:
        super().__init__(storage, kind, filename)
        self._progress_model = PROGRESS_MODELS[kind]

    def _progress_path(self, playthrough_id: str) -> Path:
        return self._storage.playthrough_dir(playthrough_id) / f"{self.kind}_progress.json"

    def load_progress(self, playthrough_id: str) -> list[Progress]:
        return self._storage.load_models(self._progress_path(playthrough_id), self._progress_model)

    async def get_all_progress_for_playthrough(self, playthrough_id: str) -> list[Progress]:
        return self.load_progress(playthrough_id)

    async def get_progress(self, playthrough_id: str, entity_id: str) -> Progress | None:
        for row in self.load_progress(playthrough_id):
            if row.entity_id == entity_id:
                return row
        return None

    def save_progress(self, progress: Progress) -> None:
        """Upsert the progress record for (playthrough, entity)."""
        record = self._progress_model.model_validate(progress.model_dump())
        rows = self.load_progress(record.playthrough_id)
        for i, row in enumerate(rows):
            if row.entity_id == record.entity_id:
                rows[i] = record
                break
        else:
            rows.append(record)
        self._storage.dump_models(self._progress_path(record.playthrough_id), rows)

    def delete_progress(self, playthrough_id: str, entity_id: str) -> None:
        path = self._progress_path(playthrough_id)
        rows = self.load_progress(playthrough_id)
        kept = [r for r in rows if r.entity_id != entity_id]
        if len(kept) != len(rows):
            self._storage.dump_models(path, kept)


class ThreadTable:
    """All threads of a game in one JSON array, filtered on read."""

    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    def _path(self, game_id: str) -> Path:
        return self._storage.game_dir(game_id) / "threads.json"

    def _read(self, game_id: str) -> list[tuple[dict, Thread | None]]:
        """Raw rows paired with their parsed thread.

        A row with an unresolvable endpoint pairs with None: it stays on disk
        but is invisible to readers.
        """
        path = self._path(game_id)
        if not path.exists():
            return []
        rows: list[tuple[dict, Thread | None]] = []
        for row in self._storage.read_json(path):
            if not isinstance(row, dict):
                raise StorageError(f"Corrupt record in {path}: expected an object, got {row!r}")
            dangling = [
                ref for ref in (row.get("source_id"), row.get("target_id"))
                if get_entity_type_from_id(ref) is None
            ]
            if dangling:
                logger.warning(
                    "Skipping thread %s in %s: unresolvable endpoint %r",
                    row.get("id"), path, dangling[0],
                )
                rows.append((row, None))
                continue
            try:
                rows.append((row, Thread.model_validate(row)))
            except ValidationError as e:
                raise StorageError(f"Corrupt record in {path}: {e}") from e
        return rows

    def load(self, game_id: str) -> list[Thread]:
        return [t for _, t in self._read(game_id) if t is not None]

    async def get_by_game_id(
        self, game_id: str, playthrough_id: str | None = None
    ) -> list[Thread]:
        return [
            t for t in self.load(game_id)
            if t.playthrough_id is None or t.playthrough_id == playthrough_id
        ]

    async def get_threads_from_entity(
        self, game_id: str, entity_id: str, playthrough_id: str | None = None
    ) -> list[Thread]:
        threads = await self.get_by_game_id(game_id, playthrough_id)
        return [t for t in threads if t.source_id == entity_id]

    async def get_requirement_threads_from_entity(
        self, game_id: str, entity_id: str
    ) -> list[Thread]:
        threads = await self.get_threads_from_entity(game_id, entity_id, None)
        return [t for t in threads if t.subtype == "requires"]

    def save(self, thread: Thread) -> None:
        """Upsert a thread by id."""
        rows = []
        replaced = False
        for row, existing in self._read(thread.game_id):
            if existing is not None and existing.id == thread.id:
                row, replaced = thread.model_dump(), True
            rows.append(row)
        if not replaced:
            rows.append(thread.model_dump())
        self._storage.write_json(self._path(thread.game_id), rows)

    def delete_where(self, game_id, predicate) -> int:
        rows = self._read(game_id)
        kept = [row for row, t in rows if t is None or not predicate(t)]
        if len(kept) != len(rows):
            self._storage.write_json(self._path(game_id), kept)
        return len(rows) - len(kept)
