"""FastAPI API endpoints under /api.

Endpoint groups: settings (health, settings), games (games, playthroughs,
player movement), progression (reachable places, entity availability,
objective completability, next steps + oracle text, loom overview). All
progression endpoints are nested under /api/playthroughs/{playthrough_id}/.
"""

from fastapi import APIRouter

from .games import router as games_router
from .progression import router as progression_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(games_router)
router.include_router(progression_router)
