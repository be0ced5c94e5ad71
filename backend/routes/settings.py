"""Health check and settings endpoints."""

from fastapi import APIRouter

from backend import storage

from .models import UpdateSettings

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings():
    """Get global app settings (oracle template, empty-state text)."""
    return storage.get_config()


@router.patch("/settings")
async def update_settings(body: UpdateSettings):
    """Update global app settings (partial merge)."""
    return storage.update_config(body.model_dump(exclude_none=True))
