"""Requirement and objective evaluation.

An entity is *available* when every game-scoped ``requires`` thread leaving
it is satisfied: the target's current playthrough status is in the thread's
explicit ``allowed_statuses`` or, when that is empty, in the default set for
the target's kind. A quest objective is *completable* by the same rule,
applied to the entity declared directly on the objective.

Targets whose kind carries no requirement status (place, map, thread, path)
never block. A target without a progress record is unmet.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from pydantic import BaseModel, Field

from quest_loom.ids import get_entity_type_from_id
from quest_loom.models import Quest, Thread
from quest_loom.repositories import ProgressSource, Repositories

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_STATUSES: dict[str, tuple[str, ...]] = {
    "quest": ("completed",),
    "insight": ("known", "resolved"),
    "item": ("acquired",),
    "person": ("alive",),
}

# Kinds whose status can satisfy a requirement, and where to read it.
STATUS_SOURCES: dict[str, Callable[[Repositories], ProgressSource]] = {
    "quest": lambda repos: repos.quests,
    "insight": lambda repos: repos.insights,
    "item": lambda repos: repos.items,
    "person": lambda repos: repos.people,
}


class AvailabilityResult(BaseModel):
    """Whether an entity's requirements hold, with the targets that don't."""

    available: bool
    unmet_target_ids: list[str] = Field(default_factory=list)


def allowed_statuses_for(kind: str, explicit: list[str] | None) -> tuple[str, ...]:
    if explicit:
        return tuple(explicit)
    return DEFAULT_ALLOWED_STATUSES.get(kind, ())


def is_requirement_satisfied(thread: Thread, target_kind: str, current_status: str) -> bool:
    return current_status in allowed_statuses_for(target_kind, thread.allowed_statuses)


async def get_playthrough_status_for_entity(
    repos: Repositories, playthrough_id: str, entity_id: str
) -> str | None:
    """Current status of a quest, insight, item or person; None when there is none."""
    kind = get_entity_type_from_id(entity_id)
    source = STATUS_SOURCES.get(kind or "")
    if source is None:
        return None
    progress = await source(repos).get_progress(playthrough_id, entity_id)
    return progress.status if progress is not None else None


async def check_entity_availability(
    repos: Repositories, game_id: str, playthrough_id: str, entity_id: str
) -> AvailabilityResult:
    threads = await repos.threads.get_requirement_threads_from_entity(game_id, entity_id)

    unmet: list[str] = []
    for thread in threads:
        target_kind = get_entity_type_from_id(thread.target_id)
        if target_kind not in STATUS_SOURCES:
            logger.debug(
                "Requirement %s on %s targets %r; not blocking",
                thread.id, entity_id, thread.target_id,
            )
            continue
        status = await get_playthrough_status_for_entity(repos, playthrough_id, thread.target_id)
        if status is None or not is_requirement_satisfied(thread, target_kind, status):
            unmet.append(thread.target_id)

    if unmet:
        logger.debug("%s unavailable, unmet targets: %s", entity_id, unmet)
    return AvailabilityResult(available=not unmet, unmet_target_ids=unmet)


async def get_objective_completability(
    repos: Repositories, playthrough_id: str, quest: Quest, objective_index: int
) -> bool:
    """Whether the objective at ``objective_index`` may be marked complete now.

    Objectives without an ``entity_id`` are always completable, and so is an
    index with no objective behind it: there is no entity gate to fail.
    """
    if not 0 <= objective_index < len(quest.objectives):
        return True
    objective = quest.objectives[objective_index]
    if not objective.entity_id:
        return True
    kind = get_entity_type_from_id(objective.entity_id)
    if kind is None:
        return False
    status = await get_playthrough_status_for_entity(repos, playthrough_id, objective.entity_id)
    if status is None:
        return False
    return status in allowed_statuses_for(kind, objective.allowed_statuses)
