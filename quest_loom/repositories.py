"""Data-access contracts consumed by the progression engine.

The engine only ever reads. It depends on these protocols rather than on a
concrete store, so tests can hand it fakes and the app can hand it the JSON
file storage:

    async def get_by_game_id(self, game_id: str) -> list[Entity]: ...

Thread scope: ``playthrough_id=None`` means game-authored threads only; a
playthrough id adds that playthrough's private threads on top.
"""

from __future__ import annotations

from typing import Protocol

from quest_loom.models import Entity, Progress, Thread


class EntitySource(Protocol):
    async def get_by_game_id(self, game_id: str) -> list[Entity]: ...

    async def get_by_id(self, game_id: str, entity_id: str) -> Entity | None: ...


class ProgressSource(EntitySource, Protocol):
    async def get_all_progress_for_playthrough(self, playthrough_id: str) -> list[Progress]: ...

    async def get_progress(self, playthrough_id: str, entity_id: str) -> Progress | None: ...


class ThreadSource(Protocol):
    async def get_by_game_id(
        self, game_id: str, playthrough_id: str | None = None
    ) -> list[Thread]: ...

    async def get_threads_from_entity(
        self, game_id: str, entity_id: str, playthrough_id: str | None = None
    ) -> list[Thread]: ...

    async def get_requirement_threads_from_entity(
        self, game_id: str, entity_id: str
    ) -> list[Thread]: ...


class Repositories(Protocol):
    """One source per entity kind."""

    quests: ProgressSource
    insights: ProgressSource
    items: ProgressSource
    people: ProgressSource
    paths: ProgressSource
    places: EntitySource
    maps: EntitySource
    threads: ThreadSource
