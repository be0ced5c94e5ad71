"""Pydantic request models for API endpoints."""

from pydantic import BaseModel


class MoveBody(BaseModel):
    place_id: str | None = None


class UpdateSettings(BaseModel):
    oracle_template: str | None = None
    oracle_empty_text: str | None = None


class LocationsBody(BaseModel):
    place_ids: list[str] = []
