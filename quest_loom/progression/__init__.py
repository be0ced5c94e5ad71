"""Contextual progression: what the player can reach and do next.

Given the authored thread graph and a playthrough's progress records:
  1. Requirements: is an entity available? Are a quest objective's gates met?
  2. Path traversability: opened / blocked / restricted-until-requirements-met.
  3. Reachability: BFS over direct place links and traversable paths from
     the current position.
  4. Actionable entities: available entities in a next-step state.
  5. Route edges: thread ids on shortest routes to those entities.

Every function takes the data-access collaborators (``Repositories``) as its
first argument, re-reads a fresh snapshot, writes nothing, and keeps no state
between calls.
"""

from .actionable import (  # noqa: F401
    ActionableEntity,
    LoomOverview,
    get_actionable_entities,
    get_actionable_route_edge_ids,
    get_loom_overview,
    shortest_path_thread_ids,
)
from .location import (  # noqa: F401
    check_entity_availability_with_reachability,
    get_entity_location_place_ids,
)
from .reachability import (  # noqa: F401
    PlaceGraph,
    build_path_traversability_map,
    build_place_graph,
    compute_reachable_places,
    load_place_graph,
    reachable_from,
)
from .requirements import (  # noqa: F401
    DEFAULT_ALLOWED_STATUSES,
    AvailabilityResult,
    check_entity_availability,
    get_objective_completability,
    get_playthrough_status_for_entity,
    is_requirement_satisfied,
)
