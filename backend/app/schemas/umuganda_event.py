"""
Schémas Pydantic pour les événements Umuganda et leurs présences.
"""

import uuid
import datetime as dt
from typing import Optional

from pydantic import BaseModel, field_validator


class EventCreate(BaseModel):
    date: dt.datetime
    theme: Optional[str] = None
    location: Optional[str] = None


class EventUpdate(BaseModel):
    date: Optional[dt.datetime] = None
    theme: Optional[str] = None
    location: Optional[str] = None


class EventResponse(BaseModel):
    id: uuid.UUID
    union_id: uuid.UUID
    date: dt.datetime
    theme: Optional[str]
    location: Optional[str]
    created_by_id: Optional[uuid.UUID]
    created_at: dt.datetime
    attendance_count: int = 0

    model_config = {"from_attributes": True}


class EventCheckIn(BaseModel):
    token: str

    @field_validator("token")
    @classmethod
    def token_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le token est obligatoire.")
        return v.strip()


class EventAttendanceResponse(BaseModel):
    id: uuid.UUID
    event_id: uuid.UUID
    member_id: uuid.UUID
    church_id: uuid.UUID
    checked_in_at: dt.datetime

    model_config = {"from_attributes": True}
