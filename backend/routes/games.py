"""Game and playthrough lookup, entity locations and player movement endpoints."""

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from backend import storage

from .models import LocationsBody, MoveBody

router = APIRouter()


@router.get("/games")
async def list_games():
    """List all authored games."""
    return storage.get_storage().list_games()


@router.get("/games/{game_id}")
async def get_game(game_id: str):
    """Get a single game by id."""
    game = storage.get_storage().get_game(game_id)
    if not game:
        raise HTTPException(404, "Game not found")
    return game


@router.get("/games/{game_id}/playthroughs")
async def list_playthroughs(game_id: str):
    """List playthroughs of a game."""
    store = storage.get_storage()
    if not store.get_game(game_id):
        raise HTTPException(404, "Game not found")
    return store.list_playthroughs(game_id)


@router.get("/playthroughs/{playthrough_id}")
async def get_playthrough(playthrough_id: str):
    """Get a playthrough, including the current position."""
    playthrough = storage.get_storage().get_playthrough(playthrough_id)
    if not playthrough:
        raise HTTPException(404, "Playthrough not found")
    return playthrough


@router.patch("/playthroughs/{playthrough_id}/position")
async def move(playthrough_id: str, body: MoveBody):
    """Set the player's current position (a place reference, or null)."""
    try:
        updated = storage.get_storage().set_position(playthrough_id, body.place_id)
    except ValidationError as e:
        raise HTTPException(400, str(e))
    if not updated:
        raise HTTPException(404, "Playthrough not found")
    return updated


@router.put("/games/{game_id}/entities/{entity_id}/locations")
async def set_locations(game_id: str, entity_id: str, body: LocationsBody):
    """Replace an entity's location threads with one per given place."""
    store = storage.get_storage()
    if not store.get_game(game_id):
        raise HTTPException(404, "Game not found")
    try:
        table = store.table_for(entity_id)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if not await table.get_by_id(game_id, entity_id):
        raise HTTPException(404, "Entity not found")
    try:
        threads = store.sync_location_threads(game_id, entity_id, body.place_ids)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return threads
