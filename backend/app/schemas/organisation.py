"""
Schémas Pydantic pour la hiérarchie Union → District → Église.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


def _clean_name(v: str) -> str:
    if not v.strip():
        raise ValueError("Le nom ne peut pas être vide.")
    return v.strip()


class UnionCreate(BaseModel):
    name: str
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        return _clean_name(v)


class UnionResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class DistrictCreate(BaseModel):
    union_id: uuid.UUID
    name: str
    location: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        return _clean_name(v)


class DistrictUpdate(BaseModel):
    union_id: Optional[uuid.UUID] = None
    name: Optional[str] = None
    location: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return _clean_name(v) if v is not None else v


class DistrictResponse(BaseModel):
    id: uuid.UUID
    union_id: uuid.UUID
    name: str
    location: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class ChurchCreate(BaseModel):
    district_id: uuid.UUID
    name: str
    location: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        return _clean_name(v)


class ChurchUpdate(BaseModel):
    district_id: Optional[uuid.UUID] = None  # déplacement vers un autre district
    name: Optional[str] = None
    location: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return _clean_name(v) if v is not None else v


class ChurchSummary(BaseModel):
    id: uuid.UUID
    name: str

    model_config = {"from_attributes": True}


class ChurchResponse(BaseModel):
    id: uuid.UUID
    district_id: uuid.UUID
    name: str
    location: Optional[str]
    district_pastor_id: Optional[uuid.UUID]
    created_at: datetime

    model_config = {"from_attributes": True}
