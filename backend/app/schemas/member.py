"""
Schémas Pydantic pour les membres et leur pass permanent.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.identity_pass import PassResponse


class MemberCreate(BaseModel):
    national_id: str
    first_name: str
    last_name: str
    phone_number: str
    email: Optional[str] = None
    password: str

    @field_validator("national_id", "first_name", "last_name", "phone_number")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Ce champ ne peut pas être vide.")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("Le mot de passe doit contenir au moins 8 caractères.")
        return v


class MemberUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None


class MemberResponse(BaseModel):
    id: uuid.UUID
    national_id: Optional[str]
    first_name: str
    last_name: str
    phone_number: Optional[str]
    email: Optional[str]
    union_id: Optional[uuid.UUID]
    district_id: Optional[uuid.UUID]
    church_id: Optional[uuid.UUID]
    created_at: datetime

    model_config = {"from_attributes": True}


class MemberWithPass(BaseModel):
    """Membre et son pass permanent (création d'un membre, consultation du pass)."""
    member: MemberResponse
    pass_: Optional[PassResponse] = Field(default=None, alias="pass")

    model_config = {"populate_by_name": True}
