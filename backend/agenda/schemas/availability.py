# backend/agenda/schemas/availability.py
"""
Pydantic schemas for availability API.
"""

from pydantic import BaseModel, Field


class TimeSlotOut(BaseModel):
    """A bookable interval. Instants are ISO-8601 UTC ("...T12:00:00.000Z")."""
    start_at: str = Field(alias="startAt")
    end_at: str = Field(alias="endAt")
    available: bool

    model_config = {"populate_by_name": True}


class ErrorOut(BaseModel):
    detail: str
