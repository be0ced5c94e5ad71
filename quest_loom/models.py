"""Core domain models.

Authored world data (quests, insights, items, people, places, maps, paths and
the threads linking them) is game-scoped. Progress records are
playthrough-scoped and hold the mutable status the progression engine reads.
Pydantic is used for validation and serialisation at every data boundary.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import ClassVar, Literal, get_args

from pydantic import BaseModel, Field, field_validator, model_validator

from quest_loom.ids import get_entity_type_from_id

QuestStatus = Literal["available", "active", "completed", "abandoned"]
InsightStatus = Literal["unknown", "known", "resolved", "irrelevant"]
ItemStatus = Literal["not_acquired", "acquired", "used", "lost"]
PersonStatus = Literal["alive", "dead", "unknown"]
PathStatus = Literal["restricted", "opened", "blocked"]

# Status vocabulary per entity kind. Kinds missing here carry no playthrough status.
STATUS_VALUES: dict[str, tuple[str, ...]] = {
    "quest": get_args(QuestStatus),
    "insight": get_args(InsightStatus),
    "item": get_args(ItemStatus),
    "person": get_args(PersonStatus),
    "path": get_args(PathStatus),
}

ThreadSubtype = Literal[
    "custom",
    "giver",
    "location",
    "map",
    "requires",
    "objective_requires",
    "direct_place_link",
    "connects_path",
]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex


class Game(BaseModel):
    """A session container for one authored world."""

    id: str = Field(default_factory=_new_id)
    name: str
    description: str = ""
    created_at: str = Field(default_factory=_now)


class Playthrough(BaseModel):
    """One run of a game; owns all progress records and the current position."""

    id: str = Field(default_factory=_new_id)
    game_id: str
    name: str
    current_position: str | None = None  # place ref
    created_at: str = Field(default_factory=_now)

    @field_validator("current_position")
    @classmethod
    def _position_is_place(cls, value: str | None) -> str | None:
        if value is not None and get_entity_type_from_id(value) != "place":
            raise ValueError(f"current_position must be a place reference, got {value!r}")
        return value


# ---------------------------------------------------------------------------
# Authored entities
# ---------------------------------------------------------------------------

class Entity(BaseModel):
    """Base for game-scoped entities. ``id`` must be a typed ref of ``kind``."""

    kind: ClassVar[str]

    id: str
    game_id: str
    description: str = ""
    created_at: str = Field(default_factory=_now)

    @model_validator(mode="after")
    def _id_matches_kind(self) -> Entity:
        if get_entity_type_from_id(self.id) != self.kind:
            raise ValueError(f"{type(self).__name__} id must be a '{self.kind}:' reference, got {self.id!r}")
        return self


class QuestObjective(BaseModel):
    """A sub-objective of a quest.

    When ``entity_id`` is set the objective is completable only while that
    entity's status is in ``allowed_statuses`` (or the kind's default set).
    Completion itself stays a manual action recorded in QuestProgress.
    """

    label: str
    entity_id: str | None = None
    allowed_statuses: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_allowed_statuses(self) -> QuestObjective:
        if self.entity_id and self.allowed_statuses:
            kind = get_entity_type_from_id(self.entity_id)
            vocabulary = STATUS_VALUES.get(kind or "", ())
            unknown = [s for s in self.allowed_statuses if s not in vocabulary]
            if unknown:
                raise ValueError(f"Statuses {unknown} are not valid for a {kind} objective")
        return self


class Quest(Entity):
    kind: ClassVar[str] = "quest"

    title: str
    giver: str = ""
    objectives: list[QuestObjective] = Field(default_factory=list)


class Insight(Entity):
    kind: ClassVar[str] = "insight"

    title: str


class Item(Entity):
    kind: ClassVar[str] = "item"

    name: str


class Person(Entity):
    kind: ClassVar[str] = "person"

    name: str


class Place(Entity):
    kind: ClassVar[str] = "place"

    name: str


class Map(Entity):
    kind: ClassVar[str] = "map"

    name: str
    image_url: str = ""


class Path(Entity):
    """A traversal edge between places, connected through connects_path threads."""

    kind: ClassVar[str] = "path"

    name: str


ENTITY_MODELS: dict[str, type[Entity]] = {
    "quest": Quest,
    "insight": Insight,
    "item": Item,
    "person": Person,
    "place": Place,
    "map": Map,
    "path": Path,
}


# ---------------------------------------------------------------------------
# Threads
# ---------------------------------------------------------------------------

class Thread(BaseModel):
    """A directed relationship between two typed entity references.

    ``subtype`` drives logic; ``label`` is display text (or the custom text for
    ``custom`` threads). ``playthrough_id`` is None for game-authored threads.
    """

    id: str
    game_id: str
    playthrough_id: str | None = None
    source_id: str
    target_id: str
    subtype: ThreadSubtype = "custom"
    label: str = ""
    allowed_statuses: list[str] = Field(default_factory=list)
    objective_index: int | None = None
    created_at: str = Field(default_factory=_now)

    @model_validator(mode="after")
    def _check_subtype_fields(self) -> Thread:
        if get_entity_type_from_id(self.id) != "thread":
            raise ValueError(f"Thread id must be a 'thread:' reference, got {self.id!r}")
        for ref in (self.source_id, self.target_id):
            if get_entity_type_from_id(ref) is None:
                raise ValueError(f"Unresolvable thread endpoint {ref!r}")
        if self.subtype == "requires" and self.playthrough_id is not None:
            raise ValueError("requires threads must be game-scoped")
        if self.subtype == "objective_requires" and (
            self.objective_index is None or self.objective_index < 0
        ):
            raise ValueError("objective_requires threads need a non-negative objective_index")
        if self.allowed_statuses:
            target_kind = get_entity_type_from_id(self.target_id)
            vocabulary = STATUS_VALUES.get(target_kind or "", ())
            unknown = [s for s in self.allowed_statuses if s not in vocabulary]
            if unknown:
                raise ValueError(f"Statuses {unknown} are not valid for a {target_kind} target")
        return self


# ---------------------------------------------------------------------------
# Playthrough-scoped progress
# ---------------------------------------------------------------------------

class Progress(BaseModel):
    """Base for per-entity playthrough state."""

    playthrough_id: str
    entity_id: str
    notes: str = ""


class QuestProgress(Progress):
    status: QuestStatus = "available"
    completed_objective_indexes: list[int] = Field(default_factory=list)


class InsightProgress(Progress):
    status: InsightStatus = "unknown"


class ItemState(Progress):
    status: ItemStatus = "not_acquired"


class PersonProgress(Progress):
    status: PersonStatus = "alive"


class PathProgress(Progress):
    status: PathStatus = "restricted"


PROGRESS_MODELS: dict[str, type[Progress]] = {
    "quest": QuestProgress,
    "insight": InsightProgress,
    "item": ItemState,
    "person": PersonProgress,
    "path": PathProgress,
}
